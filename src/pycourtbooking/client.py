"""Client facade for authentication and owner services."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from .api import ApiClient
from .bookings import BookingService
from .const import DEFAULT_TIMEOUT_SECONDS, LOGIN_ENDPOINT, LOGIN_ROLE
from .exceptions import AuthError, ServerError, ValidationError
from .models import AuthTokens, LoginResult, User
from .store import CredentialStore, MemoryCredentialStore
from .util import resolve_base_url

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT_SECONDS)


def _format_issue(issue: Any) -> str:
    if isinstance(issue, Mapping):
        message = issue.get("message")
        path = issue.get("path")
        if isinstance(path, list) and message:
            field = ".".join(str(part) for part in path) or "field"
            return f"{field}: {message}"
        if message:
            return str(message)
    return str(issue)


def format_login_error(payload: Any) -> str:
    """Turn a rejected login response into a readable message."""
    if not isinstance(payload, Mapping):
        return "Login failed"
    details = payload.get("details")
    if isinstance(details, Mapping) and isinstance(details.get("issues"), list):
        return "\n".join(_format_issue(issue) for issue in details["issues"]) or "Validation error"
    errors = payload.get("errors")
    if isinstance(errors, list):
        return "\n".join(_format_issue(error) for error in errors) or "Validation error"
    for key in ("error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return "Login failed"


class Client:
    """Facade owning the HTTP session, the credential store and the services."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        store: CredentialStore | None = None,
        base_url: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        on_auth_failure: Callable[[], None] | None = None,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._store = store if store is not None else MemoryCredentialStore()
        self._base_url = resolve_base_url(base_url)
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._on_auth_failure = on_auth_failure
        self._api: ApiClient | None = None
        self._bookings: BookingService | None = None

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._api = None
            self._bookings = None

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def api(self) -> ApiClient:
        return self._ensure_api()

    @property
    def bookings(self) -> BookingService:
        if self._bookings is None:
            self._bookings = BookingService(self._ensure_api())
        return self._bookings

    def set_on_auth_failure(self, callback: Callable[[], None] | None) -> None:
        self._on_auth_failure = callback

    async def login(self, username: str, password: str) -> LoginResult:
        if not isinstance(username, str) or not username.strip():
            raise ValidationError("username is required.")
        if not isinstance(password, str) or not password:
            raise ValidationError("password is required.")
        _LOGGER.debug("Login started")
        payload = {"username": username.strip(), "password": password, "role": LOGIN_ROLE}
        try:
            response = await self.api.post(LOGIN_ENDPOINT, payload, skip_auth=True)
        except ServerError as exc:
            raise AuthError(
                format_login_error(exc.payload),
                status=exc.status,
                payload=exc.payload,
            ) from exc
        data = response.data if isinstance(response.data, Mapping) else {}
        try:
            tokens = AuthTokens.from_payload(data)
            user = User.from_payload(data.get("user"))
        except ValidationError as exc:
            raise AuthError(
                "Login response was incomplete.",
                status=response.status,
                payload=response.data,
            ) from exc

        await self._store.clear()
        await self._store.save_tokens(tokens)
        await self._store.save_user(user)
        self.api.coordinator.reset_session()
        _LOGGER.debug("Login completed")
        return LoginResult(tokens=tokens, user=user)

    async def logout(self) -> None:
        await self._store.clear()
        _LOGGER.debug("Logout completed")

    async def get_stored_user(self) -> User | None:
        return await self._store.get_user()

    async def is_authenticated(self) -> bool:
        return bool(await self._store.get_access_token())

    def _handle_auth_failure(self) -> None:
        if self._on_auth_failure is not None:
            self._on_auth_failure()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def _ensure_api(self) -> ApiClient:
        if self._api is None:
            self._api = ApiClient(
                self._ensure_session(),
                self._store,
                base_url=self._base_url,
                timeout=self._timeout,
                on_auth_failure=self._handle_auth_failure,
            )
        return self._api
