"""Availability app: blocked date ranges and the availability checker."""
