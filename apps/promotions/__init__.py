"""Promo codes granting a percentage discount on reservations."""
