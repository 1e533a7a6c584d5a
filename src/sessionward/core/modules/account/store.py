from typing import Protocol

from sessionward.core.modules.account.models import Account
from sessionward.core.modules.identifier.models import AccountID
from sessionward.errors import DuplicateIDError, NotFoundError


class AccountStore(Protocol):
    """Narrow account persistence used for credential lookup."""

    async def get(self, account_id: AccountID) -> Account | None: ...

    async def get_by_email(self, email: str) -> Account | None: ...

    async def insert(self, account: Account) -> None: ...

    async def update_password_hash(self, account_id: AccountID, password_hash: str) -> None: ...

    async def mark_email_verified(self, account_id: AccountID) -> None: ...


class MemoryAccountStore:
    """Dict-backed account store keyed by id, with an email index."""

    def __init__(self) -> None:
        self._accounts: dict[AccountID, Account] = {}
        self._by_email: dict[str, AccountID] = {}

    async def get(self, account_id: AccountID) -> Account | None:
        return self._accounts.get(account_id)

    async def get_by_email(self, email: str) -> Account | None:
        account_id = self._by_email.get(email)
        return None if account_id is None else self._accounts.get(account_id)

    async def insert(self, account: Account) -> None:
        if account.id in self._accounts or account.email in self._by_email:
            raise DuplicateIDError(f"Account '{account.email}' already exists")
        self._accounts[account.id] = account
        self._by_email[account.email] = account.id

    async def update_password_hash(self, account_id: AccountID, password_hash: str) -> None:
        account = self._require(account_id)
        self._accounts[account_id] = account.model_copy(update={"password_hash": password_hash})

    async def mark_email_verified(self, account_id: AccountID) -> None:
        account = self._require(account_id)
        self._accounts[account_id] = account.model_copy(update={"email_verified": True})

    def _require(self, account_id: AccountID) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account '{account_id}' not found")
        return account
