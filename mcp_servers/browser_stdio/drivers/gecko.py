"""Gecko-family (Firefox) driver on top of Selenium WebDriver."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from selenium import webdriver
from selenium.common.exceptions import (
    InvalidSelectorException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from ..errors import ActionFailure, CaptureFailure, InvalidParameter, LaunchFailure, NavigationFailure, NotFound
from ..locators import Locator
from .base import BrowserHandle, ElementRef

if TYPE_CHECKING:
    from ..config import ServerConfig

logger = logging.getLogger("mcp.browser.gecko")

BY_STRATEGY: dict[str, str] = {
    "id": By.ID,
    "css": By.CSS_SELECTOR,
    "xpath": By.XPATH,
    "name": By.NAME,
    "tag": By.TAG_NAME,
    "class": By.CLASS_NAME,
}

WAIT_CONDITIONS = {
    "present": EC.presence_of_element_located,
    "visible": EC.visibility_of_element_located,
    "clickable": EC.element_to_be_clickable,
}

# Named keys accepted by press_key, mapped onto Selenium key codes.
NAMED_KEYS: dict[str, str] = {
    "Enter": Keys.ENTER,
    "Tab": Keys.TAB,
    "Escape": Keys.ESCAPE,
    "Backspace": Keys.BACKSPACE,
    "Delete": Keys.DELETE,
    "Space": Keys.SPACE,
    "ArrowUp": Keys.ARROW_UP,
    "ArrowDown": Keys.ARROW_DOWN,
    "ArrowLeft": Keys.ARROW_LEFT,
    "ArrowRight": Keys.ARROW_RIGHT,
    "Home": Keys.HOME,
    "End": Keys.END,
    "PageUp": Keys.PAGE_UP,
    "PageDown": Keys.PAGE_DOWN,
}


def _message(exc: WebDriverException) -> str:
    """First line of a WebDriver error (Selenium appends multi-line stacktraces)."""
    text = (getattr(exc, "msg", None) or str(exc) or "").strip()
    return text.splitlines()[0] if text else type(exc).__name__


class GeckoHandle(BrowserHandle):
    engine = "gecko"

    def __init__(self, driver: Any) -> None:
        self.driver = driver
        self._closed = False

    @classmethod
    def launch(cls, config: ServerConfig, *, headless: bool, extra_args: list[str]) -> GeckoHandle:
        options = webdriver.FirefoxOptions()
        if headless:
            options.add_argument("--headless")
        for arg in [*config.extra_flags, *extra_args]:
            options.add_argument(arg)
        if config.firefox_binary:
            options.binary_location = config.firefox_binary
        try:
            driver = webdriver.Firefox(options=options)
        except WebDriverException as exc:
            raise LaunchFailure(_message(exc)) from exc
        except OSError as exc:
            raise LaunchFailure(str(exc)) from exc
        driver.set_page_load_timeout(config.navigation_timeout)
        logger.info("firefox_started session=%s", getattr(driver, "session_id", None))
        return cls(driver)

    def navigate(self, url: str) -> None:
        try:
            self.driver.get(url)
        except WebDriverException as exc:
            raise NavigationFailure(_message(exc)) from exc

    def locate(self, locator: Locator, timeout_ms: int, state: str = "present") -> ElementRef:
        condition = WAIT_CONDITIONS[state]
        wait = WebDriverWait(self.driver, max(0, timeout_ms) / 1000.0, poll_frequency=0.1)
        try:
            element = wait.until(condition((BY_STRATEGY[locator.strategy], locator.value)))
        except TimeoutException as exc:
            raise NotFound(f"No {state} element matching {locator.describe()} after {timeout_ms} ms") from exc
        except InvalidSelectorException as exc:
            raise InvalidParameter(f"Invalid {locator.strategy} locator {locator.value!r}: {_message(exc)}") from exc
        except WebDriverException as exc:
            raise ActionFailure(_message(exc)) from exc
        return ElementRef(locator=locator, ref=element)

    def act(self, action: str, element: ElementRef | None = None, payload: Any = None) -> Any:
        try:
            if action == "key_press":
                key = str(payload)
                ActionChains(self.driver).send_keys(NAMED_KEYS.get(key, key)).perform()
                return None
            if element is None:
                raise ActionFailure(f"Action {action} needs an element")

            el = element.ref
            if action == "click":
                el.click()
            elif action == "type":
                el.clear()
                el.send_keys(str(payload or ""))
            elif action == "text":
                return el.text
            elif action == "hover":
                ActionChains(self.driver).move_to_element(el).perform()
            elif action == "double_click":
                ActionChains(self.driver).double_click(el).perform()
            elif action == "context_click":
                ActionChains(self.driver).context_click(el).perform()
            elif action == "drag_drop":
                if not isinstance(payload, ElementRef):
                    raise ActionFailure("drag_drop needs a target element")
                ActionChains(self.driver).drag_and_drop(el, payload.ref).perform()
            elif action == "upload":
                el.send_keys(str(payload))
            else:
                raise ActionFailure(f"Unsupported action: {action}")
        except WebDriverException as exc:
            raise ActionFailure(_message(exc)) from exc
        return None

    def capture(self) -> bytes:
        try:
            data = self.driver.get_screenshot_as_png()
        except WebDriverException as exc:
            raise CaptureFailure(_message(exc)) from exc
        if not data:
            raise CaptureFailure("Screenshot data is empty")
        return data

    def terminate(self) -> None:
        if self._closed:
            return
        self._closed = True
        with suppress(Exception):
            self.driver.quit()


__all__ = ["BY_STRATEGY", "GeckoHandle"]
