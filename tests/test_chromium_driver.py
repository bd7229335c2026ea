from __future__ import annotations

import base64
import time
from typing import Any

import pytest

from mcp_servers.browser_stdio.config import ServerConfig
from mcp_servers.browser_stdio.drivers import chromium
from mcp_servers.browser_stdio.drivers.chromium import ChromiumHandle, build_locate_expression, key_event_params
from mcp_servers.browser_stdio.errors import (
    CaptureFailure,
    ErrorKind,
    InvalidParameter,
    LaunchFailure,
    NavigationFailure,
    NotFound,
)
from mcp_servers.browser_stdio.locators import Locator
from mcp_servers.browser_stdio.server.dispatch import create_default_dispatcher
from mcp_servers.browser_stdio.session_cdp import CdpError
from mcp_servers.browser_stdio.sessions import SessionRegistry


class DummyConn:
    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.calls: list[tuple[str, dict[str, Any] | None]] = []
        self.responses = responses or {}
        self.events: dict[str, dict[str, Any] | None] = {}
        self.closed = False

    def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        self.calls.append((method, params))
        resp = self.responses.get(method, {})
        if isinstance(resp, Exception):
            raise resp
        if callable(resp):
            return resp(params)
        return resp

    def send_many(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [self.send(cmd["method"], cmd.get("params")) for cmd in commands]

    def clear_events(self, event_name: str) -> None:
        self.events.pop(event_name, None)

    def wait_for_event(self, event_name: str, timeout: float = 10.0) -> dict[str, Any] | None:  # noqa: ARG002
        return {"timestamp": 1.0} if event_name == "Page.loadEventFired" else None

    def close(self) -> None:
        self.closed = True

    def methods(self) -> list[str]:
        return [m for m, _ in self.calls]


FOUND = {"Runtime.evaluate": {"result": {"type": "object", "objectId": "obj-1"}}}
CENTER = {"Runtime.callFunctionOn": {"result": {"type": "object", "value": {"x": 10, "y": 20}}}}
MISSING = {"Runtime.evaluate": {"result": {"type": "object", "subtype": "null"}}}


def test_navigate_waits_for_load() -> None:
    conn = DummyConn({"Page.navigate": {"frameId": "f", "loaderId": "l1"}})
    ChromiumHandle(conn).navigate("https://example.com")
    assert conn.calls == [("Page.navigate", {"url": "https://example.com"})]


def test_navigate_error_text() -> None:
    conn = DummyConn({"Page.navigate": {"frameId": "f", "errorText": "net::ERR_NAME_NOT_RESOLVED"}})
    with pytest.raises(NavigationFailure, match="ERR_NAME_NOT_RESOLVED"):
        ChromiumHandle(conn).navigate("https://nope.invalid")


def test_navigate_load_timeout() -> None:
    conn = DummyConn({"Page.navigate": {"frameId": "f", "loaderId": "l1"}})
    conn.wait_for_event = lambda event_name, timeout=10.0: None  # type: ignore[method-assign]
    with pytest.raises(NavigationFailure, match="Timed out"):
        ChromiumHandle(conn, navigation_timeout=1.0).navigate("https://slow.test")


def test_navigate_cdp_error() -> None:
    conn = DummyConn({"Page.navigate": CdpError("Page.navigate: socket closed")})
    with pytest.raises(NavigationFailure):
        ChromiumHandle(conn).navigate("https://example.com")


def test_locate_returns_object_id() -> None:
    conn = DummyConn(FOUND)
    ref = ChromiumHandle(conn).locate(Locator("css", "#a"), 1000, state="visible")
    assert ref.ref == "obj-1"
    method, params = conn.calls[0]
    assert method == "Runtime.evaluate"
    assert params["returnByValue"] is False
    assert '"visible"' in params["expression"]


def test_locate_times_out_with_not_found() -> None:
    conn = DummyConn({"Runtime.evaluate": {"result": {"type": "object", "subtype": "null"}}})
    with pytest.raises(NotFound, match="No present element matching css='#gone' after 0 ms"):
        ChromiumHandle(conn).locate(Locator("css", "#gone"), 0)


def test_locate_bad_selector_is_invalid_parameter() -> None:
    conn = DummyConn(
        {
            "Runtime.evaluate": {
                "result": {"type": "object", "subtype": "error"},
                "exceptionDetails": {"text": "Uncaught", "exception": {"description": "SyntaxError: bad"}},
            }
        }
    )
    with pytest.raises(InvalidParameter, match="SyntaxError"):
        ChromiumHandle(conn).locate(Locator("css", "[[["), 1000)


def test_build_locate_expression_escapes_value() -> None:
    expr = build_locate_expression(Locator("xpath", "//a[@title=\"x\"]"), "present")
    assert '"xpath"' in expr
    assert '"//a[@title=\\"x\\"]"' in expr


def test_click_dispatches_mouse_events_and_releases_object() -> None:
    conn = DummyConn({**FOUND, **CENTER})
    handle = ChromiumHandle(conn)
    ref = handle.locate(Locator("id", "btn"), 1000, state="clickable")
    handle.act("click", ref)
    mouse = [p for m, p in conn.calls if m == "Input.dispatchMouseEvent"]
    assert [p["type"] for p in mouse] == ["mouseMoved", "mousePressed", "mouseReleased"]
    assert mouse[1]["x"] == 10.0 and mouse[1]["y"] == 20.0 and mouse[1]["button"] == "left"
    assert conn.calls[-1] == ("Runtime.releaseObject", {"objectId": "obj-1"})


def test_double_and_context_click() -> None:
    conn = DummyConn({**FOUND, **CENTER})
    handle = ChromiumHandle(conn)
    ref = handle.locate(Locator("id", "btn"), 1000)
    handle.act("double_click", ref)
    pressed = [p for m, p in conn.calls if m == "Input.dispatchMouseEvent" and p["type"] == "mousePressed"]
    assert [p["clickCount"] for p in pressed] == [1, 2]

    conn.calls.clear()
    handle.act("context_click", ref)
    pressed = [p for m, p in conn.calls if m == "Input.dispatchMouseEvent" and p["type"] == "mousePressed"]
    assert [p["button"] for p in pressed] == ["right"]


def test_type_clears_then_inserts_text() -> None:
    conn = DummyConn({**FOUND, **CENTER})
    handle = ChromiumHandle(conn)
    ref = handle.locate(Locator("name", "q"), 1000)
    handle.act("type", ref, "hello")
    assert "Runtime.callFunctionOn" in conn.methods()
    assert ("Input.insertText", {"text": "hello"}) in conn.calls


def test_text_returns_value() -> None:
    conn = DummyConn({**FOUND, "Runtime.callFunctionOn": {"result": {"type": "string", "value": "Welcome"}}})
    handle = ChromiumHandle(conn)
    ref = handle.locate(Locator("tag", "h1"), 1000)
    assert handle.act("text", ref) == "Welcome"


def test_drag_drop_moves_between_centers() -> None:
    conn = DummyConn({**FOUND, **CENTER})
    handle = ChromiumHandle(conn)
    src = handle.locate(Locator("id", "a"), 1000)
    dst = handle.locate(Locator("id", "b"), 1000)
    handle.act("drag_drop", src, dst)
    types = [p["type"] for m, p in conn.calls if m == "Input.dispatchMouseEvent"]
    assert types[0] == "mouseMoved"
    assert types[1] == "mousePressed"
    assert types[-1] == "mouseReleased"


def test_upload_sets_files_on_input() -> None:
    conn = DummyConn(FOUND)
    handle = ChromiumHandle(conn)
    ref = handle.locate(Locator("id", "file"), 1000)
    handle.act("upload", ref, "/tmp/doc.txt")
    assert ("DOM.setFileInputFiles", {"objectId": "obj-1", "files": ["/tmp/doc.txt"]}) in conn.calls


def test_press_key_sends_down_and_up() -> None:
    conn = DummyConn()
    ChromiumHandle(conn).act("key_press", None, "Enter")
    events = [p for m, p in conn.calls if m == "Input.dispatchKeyEvent"]
    assert [e["type"] for e in events] == ["keyDown", "keyUp"]
    assert events[0]["windowsVirtualKeyCode"] == 13
    assert events[0]["text"] == "\r"
    assert "text" not in events[1]


def test_key_event_params_for_characters() -> None:
    assert key_event_params("a") == {"key": "a", "code": "KeyA", "text": "a", "windowsVirtualKeyCode": ord("A")}
    assert key_event_params("7")["code"] == "Digit7"
    assert key_event_params("Tab")["windowsVirtualKeyCode"] == 9


def test_capture_decodes_png() -> None:
    png = b"\x89PNG\r\n"
    conn = DummyConn({"Page.captureScreenshot": {"data": base64.b64encode(png).decode()}})
    assert ChromiumHandle(conn).capture() == png


def test_capture_empty_data() -> None:
    conn = DummyConn({"Page.captureScreenshot": {}})
    with pytest.raises(CaptureFailure):
        ChromiumHandle(conn).capture()


def test_terminate_is_idempotent() -> None:
    conn = DummyConn()
    handle = ChromiumHandle(conn)
    handle.terminate()
    handle.terminate()
    assert conn.closed


def test_locate_waits_for_the_full_timeout() -> None:
    conn = DummyConn(MISSING)
    started = time.monotonic()
    with pytest.raises(NotFound):
        ChromiumHandle(conn).locate(Locator("css", "#never"), 300)
    elapsed = time.monotonic() - started
    assert 0.3 <= elapsed < 0.55
    assert conn.methods().count("Runtime.evaluate") >= 2


def test_find_element_by_xpath_times_out_through_dispatch() -> None:
    conn = DummyConn(MISSING)
    registry = SessionRegistry(lambda engine, **kwargs: ChromiumHandle(conn))
    dispatcher = create_default_dispatcher(ServerConfig(chromium_binary="chromium"), registry)
    dispatcher.dispatch("start_browser", {"browser": "chrome"})
    started = time.monotonic()
    result = dispatcher.dispatch("find_element", {"by": "xpath", "value": "//div[@id='never']", "timeout": 300})
    elapsed = time.monotonic() - started
    assert result.error == ErrorKind.NOT_FOUND
    assert 0.3 <= elapsed < 0.55
    assert '"xpath"' in conn.calls[0][1]["expression"]


def test_press_key_types_unnamed_strings() -> None:
    conn = DummyConn()
    ChromiumHandle(conn).act("key_press", None, "hello")
    assert conn.calls == [("Input.insertText", {"text": "hello"})]


def test_release_drops_remote_objects() -> None:
    conn = DummyConn(FOUND)
    handle = ChromiumHandle(conn)
    ref = handle.locate(Locator("id", "a"), 1000)
    handle.release(ref, None)
    assert conn.calls[-1] == ("Runtime.releaseObject", {"objectId": "obj-1"})
    assert conn.methods().count("Runtime.releaseObject") == 1


def test_launch_attach_failure_stops_the_browser(monkeypatch: pytest.MonkeyPatch) -> None:
    stopped: list[Any] = []

    class DummyProcess:
        pid = 4242

    class DummyOwned:
        port = 9222
        process = DummyProcess()
        targets = [{"webSocketDebuggerUrl": "ws://127.0.0.1:9222/devtools/page/1"}]

    class DummyLauncher:
        def __init__(self, binary: str, **kwargs: Any) -> None:
            self.binary = binary

        def launch(self, *, headless: bool, extra_args: list[str]) -> DummyOwned:
            return DummyOwned()

        @staticmethod
        def stop(owned: Any) -> None:
            stopped.append(owned)

    def refuse(url: str, timeout: float = 10.0) -> Any:
        raise CdpError("connection refused")

    monkeypatch.setattr(chromium, "ChromiumLauncher", DummyLauncher)
    monkeypatch.setattr(chromium, "CdpConnection", refuse)

    with pytest.raises(LaunchFailure, match="Cannot attach to Chromium: connection refused"):
        ChromiumHandle.launch(ServerConfig(chromium_binary="chromium"), headless=True, extra_args=[])
    assert len(stopped) == 1
    assert isinstance(stopped[0], DummyOwned)
