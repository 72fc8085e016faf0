"""Exception hierarchy shared by the storage layer and the store modules.

Store modules (listings, cart, orders, accounts) derive their own errors from
these kinds so callers can translate them without knowing which store raised.
"""


class DatabaseError(Exception):
    """Raised when a storage operation fails."""
    pass


class DatabaseSchemaError(DatabaseError):
    """Raised when schema files are invalid or migrations fail."""
    pass


class ValidationError(ValueError):
    """Raised when input fields are missing or invalid."""
    pass


class NotFoundError(LookupError):
    """Raised when a lookup by id misses."""
    pass


class ConflictError(Exception):
    """Raised when a write violates a uniqueness constraint."""
    pass


__all__ = [
    'DatabaseError',
    'DatabaseSchemaError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
]
