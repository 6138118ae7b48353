"""Authentication service interfaces."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from .entities import Account, Role, TokenPair, TokenPayload, TokenVerification


class PasswordServiceInterface(ABC):
    """Interface for password hashing and verification."""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """
        Hash a password securely.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        pass

    @abstractmethod
    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify password against hash.

        Args:
            password: Plain text password
            hashed_password: Stored password hash

        Returns:
            True if password matches, False otherwise
        """
        pass


class PayloadCipherInterface(ABC):
    """Interface for symmetric encryption of token payloads."""

    @abstractmethod
    def encrypt(self, payload: TokenPayload) -> str:
        """
        Encrypt payload with a fresh initialization vector.

        Returns:
            String of the form `<iv_hex>:<ciphertext_hex>`
        """
        pass

    @abstractmethod
    def decrypt(self, data: str) -> TokenPayload:
        """
        Decrypt a string produced by `encrypt`.

        Raises:
            PayloadFormatError: If the string is not `<iv_hex>:<ciphertext_hex>`
            PayloadDecryptionError: If the ciphertext was not produced under this key
        """
        pass


class TokenServiceInterface(ABC):
    """Interface for signed token operations."""

    @abstractmethod
    def issue(self, payload: TokenPayload) -> TokenPair:
        """
        Create access and refresh token pair wrapping the encrypted payload.

        Args:
            payload: Identity claims

        Returns:
            Token pair with access and refresh tokens
        """
        pass

    @abstractmethod
    def issue_access_token(self, payload: TokenPayload) -> str:
        """Create a standalone access token."""
        pass

    @abstractmethod
    def verify_access_token(self, token: str) -> TokenVerification:
        """Verify an access token's signature, expiry and payload."""
        pass

    @abstractmethod
    def verify_refresh_token(self, token: str) -> TokenVerification:
        """Verify a refresh token's signature, expiry and payload."""
        pass


class AccountRepositoryInterface(ABC):
    """Interface for account data access operations."""

    @abstractmethod
    async def get_account_by_id(self, account_id: int) -> Optional[Account]:
        """
        Get account by ID.

        Args:
            account_id: Account identifier

        Returns:
            Account entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_account_by_email(self, email: str) -> Optional[Account]:
        """
        Get account by email.

        Args:
            email: Email address

        Returns:
            Account entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_account_by_verification_token(self, token: str) -> Optional[Account]:
        """Get account holding the given email verification token."""
        pass

    @abstractmethod
    async def get_account_by_reset_token(self, token: str) -> Optional[Account]:
        """Get account holding the given password reset token."""
        pass

    @abstractmethod
    async def create_account(self, account: Account) -> Account:
        """
        Create new account.

        Args:
            account: Account entity to create

        Returns:
            Created account entity with ID
        """
        pass

    @abstractmethod
    async def update_account(self, account_id: int, **fields: Any) -> Optional[Account]:
        """
        Apply a partial update to an account.

        Args:
            account_id: Account identifier
            **fields: Column values to overwrite

        Returns:
            Updated account entity, None if not found
        """
        pass


class RoleRepositoryInterface(ABC):
    """Interface for role data access operations."""

    @abstractmethod
    async def list_roles(self) -> List[Role]:
        pass

    @abstractmethod
    async def get_role_by_name(self, name: str) -> Optional[Role]:
        pass

    @abstractmethod
    async def create_role(self, role: Role) -> Role:
        pass

    @abstractmethod
    async def get_role_by_id(self, role_id: int) -> Optional[Role]:
        pass

    @abstractmethod
    async def update_role(self, role_id: int, name: str) -> Role:
        pass

    @abstractmethod
    async def delete_role(self, role_id: int) -> None:
        pass
