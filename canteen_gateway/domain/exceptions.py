"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UserNotFoundError(DomainException):
    """Owning user record of a recurring order does not exist"""

    pass


class StorageUnavailableError(DomainException):
    """Database cannot be reached; aborts a whole batch pass"""

    pass


class ConcurrentModificationError(DomainException):
    """Transaction kept losing to concurrent writers and gave up"""

    pass


class RecurringOrderNotFoundError(DomainException):
    """Recurring order does not exist"""

    pass


class ForbiddenError(DomainException):
    """Caller does not own the resource"""

    pass


class MenuItemNotFoundError(DomainException):
    """Catalog item referenced by a recurring order does not exist"""

    pass


class InvalidScheduleError(DomainException):
    """Frequency or custom day set is not a valid recurrence rule"""

    pass


class IdentityServiceError(DomainException):
    """Identity service returned an error or is unavailable"""

    pass


class InvalidTokenError(DomainException):
    """Bearer token was rejected by the identity service"""

    pass
