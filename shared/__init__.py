"""
Shared Kernel

Value objects, the domain error taxonomy and the API exception handler
shared by every resort app.
"""
