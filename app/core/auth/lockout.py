"""Failed-login tracking and account lockout."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .config import AuthConfig
from .entities import Account
from .exceptions import AccountLockedException, NoPasswordSetException
from .interfaces import AccountRepositoryInterface, PasswordServiceInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockoutDecision:
    """Account fields to persist after a failed password attempt."""

    failed_login_attempts: int
    locked_until: Optional[datetime]
    locked: bool

    def as_fields(self) -> dict:
        fields = {"failed_login_attempts": self.failed_login_attempts}
        if self.locked:
            fields["locked_until"] = self.locked_until
        return fields


class LockoutPolicy:
    """
    Decides how a failed password attempt changes an account.

    The counter grows by one per failure until the failure that reaches the
    threshold, which opens a lockout window and resets the counter to zero.
    """

    def __init__(self, config: AuthConfig) -> None:
        self._threshold = config.lockout_threshold
        self._duration = config.lockout_duration

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def duration(self) -> timedelta:
        return self._duration

    def is_locked(self, account: Account, now: datetime) -> bool:
        return account.is_locked(now)

    def on_failed_attempt(self, account: Account, now: datetime) -> LockoutDecision:
        """
        Compute the post-failure account state.

        Args:
            account: Account as read before the attempt
            now: Time of the attempt

        Returns:
            Decision holding the new counter and, when tripped, the lock expiry
        """
        if account.failed_login_attempts >= self._threshold - 1:
            return LockoutDecision(
                failed_login_attempts=0,
                locked_until=now + self._duration,
                locked=True,
            )
        return LockoutDecision(
            failed_login_attempts=account.failed_login_attempts + 1,
            locked_until=account.locked_until,
            locked=False,
        )


class CredentialVerifier:
    """Checks submitted passwords and applies the lockout policy on mismatch."""

    def __init__(
        self,
        account_repository: AccountRepositoryInterface,
        password_service: PasswordServiceInterface,
        lockout_policy: LockoutPolicy,
    ) -> None:
        self._account_repository = account_repository
        self._password_service = password_service
        self._lockout_policy = lockout_policy

    async def verify(
        self, account: Account, password: str, now: Optional[datetime] = None
    ) -> bool:
        """
        Verify a password for an account.

        Args:
            account: Account as currently stored
            password: Submitted plain text password
            now: Time of the attempt, defaults to the current UTC time

        Returns:
            True on match, False on a mismatch that did not trip a lockout

        Raises:
            AccountLockedException: If the account is locked, or this failure locked it
            NoPasswordSetException: If the account has no password hash
        """
        now = now or datetime.now(timezone.utc)

        if self._lockout_policy.is_locked(account, now):
            logger.info("Login refused for locked account %s", account.id)
            raise AccountLockedException(
                account.locked_until, self._lockout_policy.duration
            )

        if not account.has_password:
            raise NoPasswordSetException()

        if self._password_service.verify_password(password, account.password_hash):
            return True

        decision = self._lockout_policy.on_failed_attempt(account, now)
        await self._account_repository.update_account(account.id, **decision.as_fields())

        if decision.locked:
            logger.warning(
                "Account %s locked until %s after %d failed logins",
                account.id,
                decision.locked_until.isoformat(),
                self._lockout_policy.threshold,
            )
            raise AccountLockedException(
                decision.locked_until, self._lockout_policy.duration
            )

        logger.info(
            "Failed login for account %s (%d consecutive)",
            account.id,
            decision.failed_login_attempts,
        )
        return False
