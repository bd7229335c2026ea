"""
Automation driver interface.

The protocol core only opens, uses and closes handles; everything
engine-specific lives behind ``BrowserHandle``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..locators import Locator


@dataclass(slots=True)
class ElementRef:
    """Opaque reference to a located element; ``ref`` is engine-specific."""

    locator: Locator
    ref: Any


class BrowserHandle(ABC):
    engine: str = ""

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Load ``url`` in the controlled page."""

    @abstractmethod
    def locate(self, locator: Locator, timeout_ms: int, state: str = "present") -> ElementRef:
        """Wait up to ``timeout_ms`` for an element in ``state``; raise NotFound otherwise."""

    @abstractmethod
    def act(self, action: str, element: ElementRef | None = None, payload: Any = None) -> Any:
        """Perform one action on ``element`` (or the focused page for ``key_press``).

        Actions: ``click``, ``type`` (payload: text), ``text`` (returns the
        visible text), ``hover``, ``drag_drop`` (payload: target ElementRef),
        ``double_click``, ``context_click``, ``key_press`` (payload: key name),
        ``upload`` (payload: file path). Elements passed to ``act`` are
        released by the handle.
        """

    def release(self, *elements: ElementRef | None) -> None:
        """Drop engine-side references to located elements that no action consumed."""

    @abstractmethod
    def capture(self) -> bytes:
        """Return a PNG of the current viewport."""

    @abstractmethod
    def terminate(self) -> None:
        """Release the browser. Idempotent; never raises."""


__all__ = ["BrowserHandle", "ElementRef"]
