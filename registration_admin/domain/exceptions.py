"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class StoreError(DomainException):
    """Entity store rejected a call or is unavailable"""

    pass


class UnknownTableError(StoreError):
    """Store was asked for a table it does not manage"""

    pass
