from __future__ import annotations

import re
from typing import Any

import pytest

from mcp_servers.browser_stdio.drivers import BrowserHandle
from mcp_servers.browser_stdio.errors import (
    DriverError,
    LaunchFailure,
    NoActiveSession,
    UnknownSession,
    UnsupportedEngine,
)
from mcp_servers.browser_stdio.sessions import SessionRegistry


class DummyHandle(BrowserHandle):
    def __init__(self, engine: str, *, fail_terminate: bool = False) -> None:
        self.engine = engine
        self.terminated = 0
        self.fail_terminate = fail_terminate

    def navigate(self, url: str) -> None:
        pass

    def locate(self, locator, timeout_ms, state="present"):  # noqa: ANN001
        raise NotImplementedError

    def act(self, action, element=None, payload=None):  # noqa: ANN001
        return None

    def capture(self) -> bytes:
        return b""

    def terminate(self) -> None:
        self.terminated += 1
        if self.fail_terminate:
            raise RuntimeError("boom")


def _registry(launched: list[tuple[str, dict[str, Any]]] | None = None, **handle_kwargs: Any) -> SessionRegistry:
    def launcher(engine: str, **kwargs: Any) -> DummyHandle:
        if launched is not None:
            launched.append((engine, kwargs))
        return DummyHandle(engine, **handle_kwargs)

    return SessionRegistry(launcher)


def test_create_sets_current_and_formats_id() -> None:
    launched: list[tuple[str, dict[str, Any]]] = []
    reg = _registry(launched)
    session = reg.create("Chrome", headless=True, extra_args=["--mute-audio"])
    assert re.fullmatch(r"Chrome_[0-9a-f]{32}", session.id)
    assert session.engine == "chromium"
    assert reg.current_id == session.id
    assert launched == [("chromium", {"headless": True, "extra_args": ["--mute-audio"]})]


@pytest.mark.parametrize(("browser", "engine"), [("firefox", "gecko"), ("gecko", "gecko"), ("chromium", "chromium")])
def test_engine_aliases(browser: str, engine: str) -> None:
    reg = _registry()
    assert reg.create(browser).engine == engine


def test_unsupported_engine_leaves_registry_untouched() -> None:
    reg = _registry()
    with pytest.raises(UnsupportedEngine) as exc_info:
        reg.create("safari")
    assert str(exc_info.value) == "Unsupported browser: safari"
    assert len(reg) == 0
    assert reg.current_id is None


def test_launch_failure_is_wrapped_and_not_registered() -> None:
    def launcher(engine: str, **kwargs: Any) -> BrowserHandle:
        raise RuntimeError("no binary")

    reg = SessionRegistry(launcher)
    with pytest.raises(LaunchFailure, match="no binary"):
        reg.create("chrome")
    assert len(reg) == 0
    assert reg.current_id is None


def test_ids_are_unique_and_latest_is_current() -> None:
    reg = _registry()
    a = reg.create("chrome")
    b = reg.create("chrome")
    assert a.id != b.id
    assert reg.current_id == b.id
    assert reg.resolve().id == b.id
    assert reg.resolve(a.id).id == a.id


def test_resolve_without_sessions_raises() -> None:
    reg = _registry()
    with pytest.raises(NoActiveSession):
        reg.resolve()
    with pytest.raises(NoActiveSession):
        reg.current_driver()
    with pytest.raises(UnknownSession):
        reg.resolve("chrome_missing")


def test_close_current_clears_pointer_and_terminates_once() -> None:
    reg = _registry()
    session = reg.create("firefox")
    reg.close(session.id)
    assert session.id not in reg
    assert reg.current_id is None
    assert session.handle.terminated == 1
    # Session.terminate is guarded; a second call never reaches the handle.
    session.terminate()
    assert session.handle.terminated == 1


def test_close_other_session_keeps_current() -> None:
    reg = _registry()
    a = reg.create("chrome")
    b = reg.create("chrome")
    reg.close(a.id)
    assert reg.current_id == b.id


def test_close_unknown_session() -> None:
    reg = _registry()
    with pytest.raises(UnknownSession, match="Unknown session: nope"):
        reg.close("nope")


def test_close_removes_entry_even_when_terminate_fails() -> None:
    reg = _registry(fail_terminate=True)
    session = reg.create("chrome")
    with pytest.raises(DriverError):
        reg.close(session.id)
    assert len(reg) == 0
    assert reg.current_id is None


def test_close_all_is_best_effort() -> None:
    handles: list[DummyHandle] = []

    def launcher(engine: str, **kwargs: Any) -> DummyHandle:
        handle = DummyHandle(engine, fail_terminate=not handles)
        handles.append(handle)
        return handle

    reg = SessionRegistry(launcher)
    reg.create("chrome")
    reg.create("firefox")
    assert reg.close_all() == 2
    assert [h.terminated for h in handles] == [1, 1]
    assert len(reg) == 0
    assert reg.current_id is None
    assert reg.close_all() == 0


def test_status_text() -> None:
    reg = _registry()
    assert reg.status_text() == "No active browser session"
    a = reg.create("firefox")
    assert reg.status_text() == f"Active browser session: {a.id}"
    b = reg.create("chrome")
    assert reg.status_text(a.id) == f"Browser session {a.id} is active (gecko)"
    assert reg.status_text("unknown") == f"Active browser session: {b.id}"
