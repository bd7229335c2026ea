"""Locator strategies shared by every driver."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import UnsupportedLocatorStrategy

LOCATOR_STRATEGIES: tuple[str, ...] = ("id", "css", "xpath", "name", "tag", "class")

# Wait conditions, weakest first.
ELEMENT_STATES: tuple[str, ...] = ("present", "visible", "clickable")


@dataclass(slots=True, frozen=True)
class Locator:
    strategy: str
    value: str

    def describe(self) -> str:
        return f"{self.strategy}={self.value!r}"


def resolve_locator(by: str, value: str) -> Locator:
    """Build a locator; the strategy set is closed and never falls back."""
    strategy = (by or "").strip().lower()
    if strategy not in LOCATOR_STRATEGIES:
        raise UnsupportedLocatorStrategy(by)
    return Locator(strategy=strategy, value=value)


__all__ = ["ELEMENT_STATES", "LOCATOR_STRATEGIES", "Locator", "resolve_locator"]
