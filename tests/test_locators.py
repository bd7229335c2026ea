from __future__ import annotations

import pytest

from mcp_servers.browser_stdio.errors import UnsupportedLocatorStrategy
from mcp_servers.browser_stdio.locators import Locator, resolve_locator


@pytest.mark.parametrize("by", ["id", "CSS", "XPath", "name", "Tag", "class"])
def test_resolve_locator_is_case_insensitive(by: str) -> None:
    loc = resolve_locator(by, "#x")
    assert loc == Locator(strategy=by.lower(), value="#x")


@pytest.mark.parametrize("by", ["link", "", "partial_link_text", "cssSelector"])
def test_resolve_locator_rejects_other_strategies(by: str) -> None:
    with pytest.raises(UnsupportedLocatorStrategy) as exc_info:
        resolve_locator(by, "x")
    assert str(exc_info.value) == f"Unsupported locator strategy: {by}"


def test_locator_describe() -> None:
    assert Locator("css", "#login").describe() == "css='#login'"
