"""
Chromium-family driver speaking raw CDP.

Elements are located by polling ``Runtime.evaluate`` and kept as remote
object ids; input goes through ``Input.dispatch*Event`` at the element's
on-screen center.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from ..errors import ActionFailure, CaptureFailure, InvalidParameter, LaunchFailure, NavigationFailure, NotFound
from ..launcher import ChromiumLauncher, ChromiumProcess
from ..locators import ELEMENT_STATES, Locator
from ..session_cdp import CdpConnection, CdpError
from .base import BrowserHandle, ElementRef

if TYPE_CHECKING:
    from ..config import ServerConfig

logger = logging.getLogger("mcp.browser.chromium")

POLL_INTERVAL = 0.1

LOCATE_JS = """
(() => {
    const strategy = __STRATEGY__;
    const value = __VALUE__;
    const state = __STATE__;
    let el = null;
    switch (strategy) {
        case 'id': el = document.getElementById(value); break;
        case 'css': el = document.querySelector(value); break;
        case 'xpath':
            el = document.evaluate(value, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null).singleNodeValue;
            break;
        case 'name': el = document.getElementsByName(value)[0] || null; break;
        case 'tag': el = document.getElementsByTagName(value)[0] || null; break;
        case 'class': el = document.getElementsByClassName(value)[0] || null; break;
    }
    if (!el || state === 'present') return el;
    if (!(el instanceof Element)) return null;
    const style = window.getComputedStyle(el);
    const r = el.getBoundingClientRect();
    const visible = r.width > 0 && r.height > 0 && style.visibility !== 'hidden' && style.display !== 'none';
    if (!visible) return null;
    if (state === 'clickable' && el.disabled) return null;
    return el;
})()
"""

CENTER_FN = """
function() {
    try {
        this.scrollIntoView({ behavior: 'instant', block: 'center', inline: 'center' });
    } catch (e) {
        // ignore
    }
    const r = this.getBoundingClientRect();
    return { x: r.x + r.width / 2, y: r.y + r.height / 2 };
}
"""

CLEAR_FN = """
function() {
    this.focus();
    if (this.isContentEditable) {
        this.textContent = '';
    } else if ('value' in this) {
        this.value = '';
        this.dispatchEvent(new Event('input', { bubbles: true }));
    }
}
"""

TEXT_FN = """
function() {
    return String(this.innerText ?? this.textContent ?? '').trim();
}
"""

KEY_CODES: dict[str, int] = {
    "Enter": 13,
    "Tab": 9,
    "Escape": 27,
    "Backspace": 8,
    "Delete": 46,
    "Space": 32,
    "ArrowUp": 38,
    "ArrowDown": 40,
    "ArrowLeft": 37,
    "ArrowRight": 39,
    "Home": 36,
    "End": 35,
    "PageUp": 33,
    "PageDown": 34,
}

# Keys that also produce text when pressed.
KEY_TEXT: dict[str, str] = {"Enter": "\r", "Tab": "\t", "Space": " "}


def build_locate_expression(locator: Locator, state: str) -> str:
    return (
        LOCATE_JS.replace("__STRATEGY__", json.dumps(locator.strategy))
        .replace("__VALUE__", json.dumps(locator.value))
        .replace("__STATE__", json.dumps(state))
    )


def key_event_params(key: str) -> dict[str, Any]:
    """Describe ``key`` the way Input.dispatchKeyEvent expects it."""
    if len(key) == 1:
        code = f"Key{key.upper()}" if key.isalpha() else (f"Digit{key}" if key.isdigit() else "")
        return {
            "key": key,
            "code": code,
            "text": key,
            "windowsVirtualKeyCode": ord(key.upper()),
        }
    params: dict[str, Any] = {"key": key, "code": key, "windowsVirtualKeyCode": KEY_CODES.get(key, 0)}
    if key in KEY_TEXT:
        params["text"] = KEY_TEXT[key]
    if key == "Space":
        params["key"] = " "
    return params


class ChromiumHandle(BrowserHandle):
    engine = "chromium"

    def __init__(
        self,
        conn: CdpConnection,
        *,
        owned: ChromiumProcess | None = None,
        navigation_timeout: float = 30.0,
    ) -> None:
        self.conn = conn
        self.owned = owned
        self.navigation_timeout = navigation_timeout
        self._closed = False

    @classmethod
    def launch(cls, config: ServerConfig, *, headless: bool, extra_args: list[str]) -> ChromiumHandle:
        launcher = ChromiumLauncher(config.chromium_binary, extra_flags=config.extra_flags, timeout=config.launch_timeout)
        owned = launcher.launch(headless=headless, extra_args=extra_args)
        ws_url = owned.targets[0]["webSocketDebuggerUrl"]
        try:
            conn = CdpConnection(ws_url, timeout=config.cdp_timeout)
            conn.send("Page.enable")
            conn.send("Runtime.enable")
        except CdpError as exc:
            ChromiumLauncher.stop(owned)
            raise LaunchFailure(f"Cannot attach to Chromium: {exc}") from exc
        logger.info("chromium_started port=%s pid=%s", owned.port, owned.process.pid)
        return cls(conn, owned=owned, navigation_timeout=config.navigation_timeout)

    # ─────────────────────────────────────────────────────────────────────────
    # Navigation
    # ─────────────────────────────────────────────────────────────────────────

    def navigate(self, url: str) -> None:
        self.conn.clear_events("Page.loadEventFired")
        try:
            result = self.conn.send("Page.navigate", {"url": url})
        except CdpError as exc:
            raise NavigationFailure(str(exc)) from exc
        if result.get("errorText"):
            raise NavigationFailure(f"{url}: {result['errorText']}")
        # Same-document navigations have no loaderId and fire no load event.
        if not result.get("loaderId"):
            return
        try:
            loaded = self.conn.wait_for_event("Page.loadEventFired", timeout=self.navigation_timeout)
        except CdpError as exc:
            raise NavigationFailure(str(exc)) from exc
        if loaded is None:
            raise NavigationFailure(f"Timed out after {self.navigation_timeout:.0f}s waiting for {url} to load")

    # ─────────────────────────────────────────────────────────────────────────
    # Elements
    # ─────────────────────────────────────────────────────────────────────────

    def _query(self, locator: Locator, state: str) -> str | None:
        result = self.conn.send(
            "Runtime.evaluate",
            {"expression": build_locate_expression(locator, state), "returnByValue": False},
        )
        details = result.get("exceptionDetails")
        if details:
            exc = details.get("exception") if isinstance(details, dict) else None
            reason = (exc or {}).get("description") or (details or {}).get("text") or "evaluation failed"
            raise InvalidParameter(f"Invalid {locator.strategy} locator {locator.value!r}: {reason}")
        obj = result.get("result") or {}
        if obj.get("subtype") == "null" or obj.get("type") == "undefined":
            return None
        object_id = obj.get("objectId")
        return object_id if isinstance(object_id, str) and object_id else None

    def locate(self, locator: Locator, timeout_ms: int, state: str = "present") -> ElementRef:
        if state not in ELEMENT_STATES:
            raise ValueError(f"unknown element state: {state}")
        deadline = time.monotonic() + max(0, timeout_ms) / 1000.0
        while True:
            object_id = self._query(locator, state)
            if object_id:
                return ElementRef(locator=locator, ref=object_id)
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise NotFound(f"No {state} element matching {locator.describe()} after {timeout_ms} ms")
            time.sleep(min(POLL_INTERVAL, remaining))

    def _call_on(self, element: ElementRef, function: str, *, by_value: bool = True) -> Any:
        result = self.conn.send(
            "Runtime.callFunctionOn",
            {
                "functionDeclaration": function,
                "objectId": element.ref,
                "returnByValue": by_value,
                "awaitPromise": True,
            },
        )
        if result.get("exceptionDetails"):
            raise ActionFailure(f"Script failed on {element.locator.describe()}: {result['exceptionDetails'].get('text')}")
        value = result.get("result") or {}
        return value.get("value")

    def _center(self, element: ElementRef) -> tuple[float, float]:
        point = self._call_on(element, CENTER_FN)
        if not isinstance(point, dict):
            raise ActionFailure(f"Element {element.locator.describe()} has no layout box")
        return float(point.get("x", 0.0)), float(point.get("y", 0.0))

    def _mouse(self, event_type: str, x: float, y: float, *, button: str = "none", click_count: int = 0) -> dict:
        return {
            "method": "Input.dispatchMouseEvent",
            "params": {"type": event_type, "x": x, "y": y, "button": button, "clickCount": click_count},
        }

    def _click(self, element: ElementRef, *, button: str = "left", clicks: int = 1) -> None:
        x, y = self._center(element)
        cmds = [self._mouse("mouseMoved", x, y)]
        for count in range(1, clicks + 1):
            cmds.append(self._mouse("mousePressed", x, y, button=button, click_count=count))
            cmds.append(self._mouse("mouseReleased", x, y, button=button, click_count=count))
        self.conn.send_many(cmds)

    def _drag(self, source: ElementRef, target: ElementRef, steps: int = 10) -> None:
        from_x, from_y = self._center(source)
        to_x, to_y = self._center(target)
        cmds = [
            self._mouse("mouseMoved", from_x, from_y),
            self._mouse("mousePressed", from_x, from_y, button="left", click_count=1),
        ]
        for i in range(1, steps + 1):
            progress = i / steps
            cmd = self._mouse(
                "mouseMoved",
                from_x + (to_x - from_x) * progress,
                from_y + (to_y - from_y) * progress,
                button="left",
            )
            cmd["delayMs"] = 10
            cmds.append(cmd)
        cmds.append(self._mouse("mouseReleased", to_x, to_y, button="left", click_count=1))
        self.conn.send_many(cmds)

    def _press_key(self, key: str) -> None:
        if len(key) != 1 and key not in KEY_CODES:
            # Unnamed strings are typed, the way WebDriver's sendKeys treats them.
            self.conn.send("Input.insertText", {"text": key})
            return
        params = key_event_params(key)
        down = {"type": "keyDown", **params}
        up = {"type": "keyUp", **{k: v for k, v in params.items() if k != "text"}}
        self.conn.send_many(
            [
                {"method": "Input.dispatchKeyEvent", "params": down},
                {"method": "Input.dispatchKeyEvent", "params": up},
            ]
        )

    def act(self, action: str, element: ElementRef | None = None, payload: Any = None) -> Any:
        if action == "key_press":
            self._press_key(str(payload))
            return None
        if element is None:
            raise ActionFailure(f"Action {action} needs an element")

        try:
            if action == "click":
                self._click(element)
            elif action == "double_click":
                self._click(element, clicks=2)
            elif action == "context_click":
                self._click(element, button="right")
            elif action == "hover":
                x, y = self._center(element)
                self.conn.send_many([self._mouse("mouseMoved", x, y)])
            elif action == "type":
                self._call_on(element, CLEAR_FN)
                if payload:
                    self.conn.send("Input.insertText", {"text": str(payload)})
            elif action == "text":
                return self._call_on(element, TEXT_FN) or ""
            elif action == "drag_drop":
                if not isinstance(payload, ElementRef):
                    raise ActionFailure("drag_drop needs a target element")
                self._drag(element, payload)
            elif action == "upload":
                self.conn.send("DOM.setFileInputFiles", {"objectId": element.ref, "files": [str(payload)]})
            else:
                raise ActionFailure(f"Unsupported action: {action}")
        finally:
            self.release(element, payload if isinstance(payload, ElementRef) else None)
        return None

    def release(self, *elements: ElementRef | None) -> None:
        for el in elements:
            if el is not None:
                with suppress(Exception):
                    self.conn.send("Runtime.releaseObject", {"objectId": el.ref})

    # ─────────────────────────────────────────────────────────────────────────
    # Capture & teardown
    # ─────────────────────────────────────────────────────────────────────────

    def capture(self) -> bytes:
        try:
            result = self.conn.send("Page.captureScreenshot", {"format": "png", "fromSurface": True})
        except CdpError as exc:
            raise CaptureFailure(str(exc)) from exc
        data = result.get("data")
        if not data:
            raise CaptureFailure("Screenshot data is empty")
        return base64.b64decode(data)

    def terminate(self) -> None:
        if self._closed:
            return
        self._closed = True
        with suppress(Exception):
            self.conn.close()
        if self.owned is not None:
            with suppress(Exception):
                ChromiumLauncher.stop(self.owned)


__all__ = ["ChromiumHandle", "build_locate_expression", "key_event_params"]
