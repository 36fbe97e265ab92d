"""Core domain logic: online payments, search, channels and themes."""
