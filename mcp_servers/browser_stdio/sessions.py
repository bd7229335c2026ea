"""
Session registry.

Owns every live browser handle. Each session is addressable by id; the
"current" session is only the default used when a caller names none.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .drivers import BrowserHandle, normalize_engine
from .errors import BrowserStdioError, DriverError, LaunchFailure, NoActiveSession, UnknownSession

logger = logging.getLogger("mcp.browser.sessions")

# (engine, *, headless, extra_args) -> handle
HandleLauncher = Callable[..., BrowserHandle]


@dataclass
class Session:
    id: str
    engine: str
    handle: BrowserHandle
    created_at: float = field(default_factory=time.time)
    _terminated: bool = field(default=False, init=False, repr=False)

    def terminate(self) -> None:
        """Ask the handle to terminate; later calls are no-ops."""
        if self._terminated:
            return
        self._terminated = True
        self.handle.terminate()


class SessionRegistry:
    def __init__(self, launcher: HandleLauncher) -> None:
        self._launcher = launcher
        self._sessions: dict[str, Session] = {}
        self._current: str | None = None
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    @property
    def current_id(self) -> str | None:
        with self._lock:
            if self._current is not None and self._current in self._sessions:
                return self._current
            return None

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}_{uuid.uuid4().hex}"
            if candidate not in self._sessions:
                return candidate

    def create(self, browser: str, *, headless: bool = False, extra_args: Sequence[str] = ()) -> Session:
        """Launch a browser and make it the current session.

        Nothing is registered unless the launch succeeds.
        """
        engine = normalize_engine(browser)
        try:
            handle = self._launcher(engine, headless=headless, extra_args=list(extra_args))
        except BrowserStdioError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise LaunchFailure(str(exc) or type(exc).__name__) from exc

        prefix = browser.strip()
        with self._lock:
            session = Session(id=self._new_id(prefix), engine=engine, handle=handle)
            self._sessions[session.id] = session
            self._current = session.id
        logger.info("session_created id=%s engine=%s headless=%s", session.id, engine, headless)
        return session

    def get(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(session_id)
        return session

    def resolve(self, session_id: str | None = None) -> Session:
        """Session named by ``session_id``, else the current one."""
        if session_id is not None:
            return self.get(session_id)
        with self._lock:
            current = self._current
            session = self._sessions.get(current) if current is not None else None
        if session is None:
            raise NoActiveSession()
        return session

    def current_driver(self) -> BrowserHandle:
        return self.resolve().handle

    def close(self, session_id: str) -> Session:
        """Terminate and forget one session; the entry is removed even if termination fails."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                raise UnknownSession(session_id)
            if self._current == session_id:
                self._current = None
        try:
            session.terminate()
        except Exception as exc:  # noqa: BLE001
            raise DriverError(f"Failed to terminate {session_id}: {exc}") from exc
        logger.info("session_closed id=%s", session_id)
        return session

    def close_all(self) -> int:
        """Best-effort termination of every session (shutdown path)."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._current = None
        for session in sessions:
            try:
                session.terminate()
            except Exception as exc:  # noqa: BLE001
                logger.warning("session_close_failed id=%s error=%s", session.id, exc)
        if sessions:
            logger.info("sessions_drained count=%d", len(sessions))
        return len(sessions)

    def status_text(self, session_id: str | None = None) -> str:
        if session_id:
            with self._lock:
                session = self._sessions.get(session_id)
            if session is not None:
                return f"Browser session {session.id} is active ({session.engine})"
        current = self.current_id
        if current is not None:
            return f"Active browser session: {current}"
        return "No active browser session"


__all__ = ["HandleLauncher", "Session", "SessionRegistry"]
