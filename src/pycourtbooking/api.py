"""Session-aware request pipeline for the owner API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import aiohttp

from .const import (
    AUTH_HEADER,
    AUTH_PREFIX,
    DEFAULT_HEADERS,
    DEFAULT_TIMEOUT_SECONDS,
    REFRESH_ENDPOINT,
    SESSION_EXPIRED_MESSAGE,
    TOKEN_FAILURE_MARKERS,
)
from .exceptions import (
    NetworkError,
    ServerError,
    SessionExpiredError,
    UnauthorizedError,
    ValidationError,
)
from .models import ApiResponse, AuthTokens
from .refresh import RefreshCoordinator
from .store import CredentialStore
from .util import resolve_base_url

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT_SECONDS)


@dataclass(frozen=True, slots=True)
class _Reply:
    status: int
    reason: str | None
    payload: Any


def _reason_text(payload: Any) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    for key in ("error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def is_token_failure(payload: Any, token: str | None) -> bool:
    """Return True when a 401 can be fixed by refreshing the access token."""
    if not token:
        return True
    reason = (_reason_text(payload) or "").lower()
    return any(marker in reason for marker in TOKEN_FAILURE_MARKERS)


class ApiClient:
    """Send owner API requests, refreshing the access token once on expiry.

    A request whose 401 names an expired, invalid or missing token waits for the
    shared :class:`RefreshCoordinator` and is replayed exactly once with the new
    token. A request whose token was already replaced by another caller is
    replayed with the stored token instead. Any other 401, and any 403, ends the
    session: the auth-failure callback fires once per failure episode and
    :class:`UnauthorizedError` is raised.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        store: CredentialStore,
        *,
        base_url: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        on_auth_failure: Callable[[], None] | None = None,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        if store is None:
            raise ValidationError("Credential store is required.")
        self._session = session
        self._store = store
        self._base_url = resolve_base_url(base_url)
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._on_auth_failure = on_auth_failure
        self._coordinator = RefreshCoordinator(
            store,
            self._exchange_refresh_token,
            on_session_ended=self._notify_auth_failure,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    def set_on_auth_failure(self, callback: Callable[[], None] | None) -> None:
        self._on_auth_failure = callback

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        skip_auth: bool = False,
    ) -> ApiResponse:
        url = self._build_url(path)
        token = None if skip_auth else await self._store.get_access_token()
        send_kwargs: dict[str, Any] = {"json": json, "params": params, "headers": headers}

        reply = await self._send(method, url, token=token, **send_kwargs)
        if not skip_auth and reply.status == HTTPStatus.UNAUTHORIZED:
            if not is_token_failure(reply.payload, token):
                raise self._unauthorized(reply)
            stored_token = await self._store.get_access_token()
            if stored_token and stored_token != token:
                # Another caller refreshed while this request was in flight.
                _LOGGER.debug("Request %s %s replayed with the current token", method, path)
                new_token = stored_token
            else:
                _LOGGER.debug("Request %s %s needs a refreshed token", method, path)
                new_token = await self._coordinator.acquire_refreshed_token()
            reply = await self._send(method, url, token=new_token, **send_kwargs)
            if reply.status == HTTPStatus.UNAUTHORIZED:
                self._coordinator.notify_session_ended()
                raise SessionExpiredError(
                    SESSION_EXPIRED_MESSAGE,
                    status=reply.status,
                    payload=reply.payload,
                )
        if not skip_auth and reply.status == HTTPStatus.FORBIDDEN:
            raise self._unauthorized(reply)
        if not 200 <= reply.status < 300:
            message = (
                _reason_text(reply.payload)
                or reply.reason
                or f"Request failed with status {reply.status}"
            )
            raise ServerError(message, status=reply.status, payload=reply.payload)
        _LOGGER.debug("Request %s %s completed with status %s", method, path, reply.status)
        return ApiResponse(data=reply.payload, status=reply.status)

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: Any | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, **kwargs)

    def _build_url(self, path: str) -> str:
        if not isinstance(path, str) or not path:
            raise ValidationError("Path must be a non-empty string.")
        if path.startswith("http://") or path.startswith("https://"):
            raise ValidationError("Use relative paths when building API requests.")
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{normalized_path}"

    def _build_headers(
        self,
        headers: Mapping[str, str] | None,
        token: str | None,
    ) -> dict[str, str]:
        merged = {**DEFAULT_HEADERS, **(headers or {})}
        if token:
            merged[AUTH_HEADER] = f"{AUTH_PREFIX}{token}"
        return merged

    async def _send(
        self,
        method: str,
        url: str,
        *,
        token: str | None,
        json: Any | None,
        params: Mapping[str, str] | None,
        headers: Mapping[str, str] | None,
    ) -> _Reply:
        try:
            async with self._session.request(
                method,
                url,
                headers=self._build_headers(headers, token),
                json=json,
                params=params,
                timeout=self._timeout,
            ) as response:
                payload = await self._read_payload(response)
                return _Reply(status=response.status, reason=response.reason, payload=payload)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise NetworkError(str(exc) or "Network error") from exc

    async def _read_payload(self, response: aiohttp.ClientResponse) -> Any:
        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return None

    async def _exchange_refresh_token(self, refresh_token: str) -> AuthTokens:
        response = await self.post(
            REFRESH_ENDPOINT,
            {"refreshToken": refresh_token},
            skip_auth=True,
        )
        return AuthTokens.from_payload(response.data)

    def _unauthorized(self, reply: _Reply) -> UnauthorizedError:
        self._coordinator.notify_session_ended()
        return UnauthorizedError(
            _reason_text(reply.payload) or "Unauthorized",
            status=reply.status,
            payload=reply.payload,
        )

    def _notify_auth_failure(self) -> None:
        if self._on_auth_failure is not None:
            self._on_auth_failure()
