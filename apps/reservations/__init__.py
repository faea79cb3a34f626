"""Reservations app package.

Owns reservation persistence, multi-amenity groups, payment receipt
review, check-in/checkout and the reschedule workflow.
"""
