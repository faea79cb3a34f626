"""Service catalog: resort amenities and their pricing options."""
