"""
Automation drivers, one per browser engine.

``launch_browser`` is the single entry point the session registry uses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import LaunchFailure, UnsupportedEngine
from .base import BrowserHandle, ElementRef

if TYPE_CHECKING:
    from ..config import ServerConfig

ENGINE_ALIASES: dict[str, str] = {
    "chrome": "chromium",
    "chromium": "chromium",
    "firefox": "gecko",
    "gecko": "gecko",
}


def normalize_engine(raw: str) -> str:
    engine = ENGINE_ALIASES.get((raw or "").strip().lower())
    if engine is None:
        raise UnsupportedEngine(raw)
    return engine


def launch_browser(engine: str, *, headless: bool, extra_args: list[str], config: ServerConfig) -> BrowserHandle:
    """Start a browser for an already-normalized engine name."""
    if engine == "chromium":
        from .chromium import ChromiumHandle

        return ChromiumHandle.launch(config, headless=headless, extra_args=extra_args)
    if engine == "gecko":
        from .gecko import GeckoHandle

        return GeckoHandle.launch(config, headless=headless, extra_args=extra_args)
    raise LaunchFailure(f"No driver for engine {engine}")


__all__ = [
    "ENGINE_ALIASES",
    "BrowserHandle",
    "ElementRef",
    "launch_browser",
    "normalize_engine",
]
