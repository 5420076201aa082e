"""Social account store abstraction."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod

from .models import SocialAccount


class SocialAccountStore(ABC):
    """Accounts keyed by the provider's external id."""

    @abstractmethod
    async def upsert(self, account: SocialAccount) -> SocialAccount:
        """Insert or update by external_id and return the stored account."""
        ...

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> SocialAccount | None:
        ...


class InMemorySocialAccountStore(SocialAccountStore):
    """In-memory account store for testing."""

    def __init__(self) -> None:
        self._accounts: dict[str, SocialAccount] = {}

    async def upsert(self, account: SocialAccount) -> SocialAccount:
        existing = self._accounts.get(account.external_id)
        stored = account
        if existing is not None and existing.created_at is not None:
            stored = dataclasses.replace(account, created_at=existing.created_at)
        self._accounts[account.external_id] = stored
        return stored

    async def get_by_external_id(self, external_id: str) -> SocialAccount | None:
        return self._accounts.get(external_id)
