"""Notifications package.

Email delivery for reservation events. Messages are sent from Celery
tasks in ``apps.reservations.tasks`` so requests never wait on SMTP.
"""
