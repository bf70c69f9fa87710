"""Score domain services: validation, persistence and live queries.

HTTP routes and socket handlers import from here; nothing in this package
knows about request or response objects.
"""
