"""Single-flight access token refresh."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .const import SESSION_EXPIRED_MESSAGE
from .exceptions import ApiError, NetworkError, SessionExpiredError, ValidationError
from .models import AuthTokens
from .store import CredentialStore

_LOGGER = logging.getLogger(__name__)

RefreshExchange = Callable[[str], Awaitable[AuthTokens]]


@dataclass(slots=True)
class RefreshState:
    """Idle when ``in_flight`` is None, otherwise InFlight with the shared result."""

    in_flight: asyncio.Future[str] | None = None

    @property
    def is_idle(self) -> bool:
        return self.in_flight is None

    def begin(self, future: asyncio.Future[str]) -> None:
        if self.in_flight is not None:
            raise RuntimeError("A token refresh is already in flight.")
        self.in_flight = future

    def finish(self) -> None:
        self.in_flight = None


class RefreshCoordinator:
    """Run at most one refresh exchange at a time and share its result.

    Every caller that arrives while an exchange is running awaits the same
    future. A rejected refresh clears the credential store, fires the
    session-ended callback once and fails all waiters with
    :class:`SessionExpiredError`. Transport failures reach the waiters as
    :class:`NetworkError` and leave the session untouched.

    The session-ended callback fires at most once per failure episode. An
    episode ends with the next successful refresh or :meth:`reset_session`.
    """

    def __init__(
        self,
        store: CredentialStore,
        exchange: RefreshExchange,
        *,
        on_session_ended: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._exchange = exchange
        self._on_session_ended = on_session_ended
        self._state = RefreshState()
        self._session_ended = False
        # Strong references keep running exchanges from being garbage-collected.
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def session_ended(self) -> bool:
        return self._session_ended

    def set_on_session_ended(self, callback: Callable[[], None] | None) -> None:
        self._on_session_ended = callback

    def reset_session(self) -> None:
        """Start a new session episode, e.g. after a fresh login."""
        self._session_ended = False

    def notify_session_ended(self) -> None:
        """Fire the session-ended callback unless this episode already did."""
        if self._session_ended:
            return
        self._session_ended = True
        if self._on_session_ended is None:
            return
        try:
            self._on_session_ended()
        except Exception:
            _LOGGER.exception("Session-ended callback failed")

    async def acquire_refreshed_token(self) -> str:
        future = self._state.in_flight
        if future is None:
            # No await between the idle check and begin(), so only one caller starts.
            loop = asyncio.get_running_loop()
            future = loop.create_future()
            self._state.begin(future)
            task = loop.create_task(self._run(future))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return await asyncio.shield(future)

    async def _run(self, future: asyncio.Future[str]) -> None:
        try:
            token = await self._refresh()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(token)
        finally:
            self._state.finish()

    async def _refresh(self) -> str:
        _LOGGER.debug("Access token refresh started")
        refresh_token = await self._store.get_refresh_token()
        if not refresh_token:
            _LOGGER.debug("Access token refresh skipped: no refresh token stored")
            error = SessionExpiredError(SESSION_EXPIRED_MESSAGE, status=401)
            await self._end_session()
            raise error
        try:
            tokens = await self._exchange(refresh_token)
        except NetworkError:
            _LOGGER.debug("Access token refresh failed: network error")
            raise
        except (ApiError, ValidationError) as exc:
            _LOGGER.debug("Access token refresh rejected")
            payload = exc.payload if isinstance(exc, ApiError) else None
            error = SessionExpiredError(SESSION_EXPIRED_MESSAGE, status=401, payload=payload)
            await self._end_session()
            raise error from exc
        await self._store.save_tokens(tokens)
        self.reset_session()
        _LOGGER.debug("Access token refresh completed")
        return tokens.access_token

    async def _end_session(self) -> None:
        await self._store.clear()
        self.notify_session_ended()
