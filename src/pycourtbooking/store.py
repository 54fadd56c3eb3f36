"""Credential storage for the access token, refresh token and cached user."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod

from .const import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, STORAGE_KEYS, USER_KEY
from .exceptions import ValidationError
from .models import AuthTokens, User


class CredentialStore(ABC):
    """Async key-value store holding the session.

    Operations are atomic per key but not across keys.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value for a key."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value for a key."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove a key if present."""

    async def clear(self) -> None:
        for key in STORAGE_KEYS:
            await self.remove(key)

    async def get_access_token(self) -> str | None:
        return await self.get(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> str | None:
        return await self.get(REFRESH_TOKEN_KEY)

    async def save_tokens(self, tokens: AuthTokens) -> None:
        await self.set(ACCESS_TOKEN_KEY, tokens.access_token)
        if tokens.refresh_token:
            await self.set(REFRESH_TOKEN_KEY, tokens.refresh_token)

    async def get_user(self) -> User | None:
        raw = await self.get(USER_KEY)
        if not raw:
            return None
        try:
            return User.from_payload(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            return None

    async def save_user(self, user: User) -> None:
        await self.set(USER_KEY, json.dumps(user.to_payload()))


class MemoryCredentialStore(CredentialStore):
    """Process-local store, used by default and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise ValidationError("Stored values must be strings.")
        self._values[key] = value

    async def remove(self, key: str) -> None:
        self._values.pop(key, None)
