import structlog

from sessionward.core.io import bounded
from sessionward.core.modules.account.models import Account
from sessionward.core.modules.account.store import AccountStore
from sessionward.core.modules.credential.hasher import CredentialHasher
from sessionward.core.modules.credential.validators import normalize_email, validate_email, validate_password
from sessionward.core.modules.identifier.models import AccountID
from sessionward.errors import DuplicateIDError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class AccountService:
    """Account creation and credential lookup."""

    def __init__(self, store: AccountStore, hasher: CredentialHasher, *, store_timeout: float) -> None:
        self._store = store
        self._hasher = hasher
        self._timeout = store_timeout

    async def create_account(self, email: str, password: str) -> Account:
        """Create account with hashed password."""
        normalized = validate_email(email)
        validate_password(password)
        if await bounded(self._store.get_by_email(normalized), self._timeout, "account_get_by_email"):
            raise ValidationError("Account already exists")

        account = Account(email=normalized, password_hash=await self._hasher.ahash(password))
        try:
            await bounded(self._store.insert(account), self._timeout, "account_insert")
        except DuplicateIDError as exc:
            raise ValidationError("Account already exists") from exc
        logger.info("account_created", account_id=account.id.to_wire())
        return account

    async def get_account(self, account_id: AccountID) -> Account:
        account = await bounded(self._store.get(account_id), self._timeout, "account_get")
        if account is None:
            raise NotFoundError(f"Account '{account_id}' not found")
        return account

    async def find_by_email(self, email: str) -> Account | None:
        return await bounded(self._store.get_by_email(normalize_email(email)), self._timeout, "account_get_by_email")

    async def lookup_credential(self, email: str) -> tuple[AccountID, str] | None:
        """Return the subject id and stored hash for an email, if the account exists."""
        account = await self.find_by_email(email)
        if account is None:
            return None
        return account.id, account.password_hash

    async def set_password(self, account_id: AccountID, new_password: str) -> None:
        validate_password(new_password)
        await self.store_password_hash(account_id, await self._hasher.ahash(new_password))
        logger.info("account_password_changed", account_id=account_id.to_wire())

    async def store_password_hash(self, account_id: AccountID, password_hash: str) -> None:
        await bounded(self._store.update_password_hash(account_id, password_hash), self._timeout, "account_update")

    async def mark_email_verified(self, account_id: AccountID) -> None:
        await bounded(self._store.mark_email_verified(account_id), self._timeout, "account_update")
        logger.info("account_email_verified", account_id=account_id.to_wire())
