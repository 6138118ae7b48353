"""Domain exceptions for the storefront service."""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain-related errors."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details


class StoreUnavailableException(DomainException):
    """Raised when the data store cannot be reached."""

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__("Data store is unavailable", details)


class RoleAlreadyExistsException(DomainException):
    """Raised when creating a role whose name is taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Role with this name already exists: {name}")
        self.name = name


class RoleNotFoundException(DomainException):
    """Raised when a role id does not exist."""

    def __init__(self, role_id: int) -> None:
        super().__init__(f"Role not found: {role_id}")
        self.role_id = role_id


class RoleInUseException(DomainException):
    """Raised when deleting a role still assigned to accounts."""

    def __init__(self, role_id: int) -> None:
        super().__init__(f"Role is assigned to accounts: {role_id}")
        self.role_id = role_id
