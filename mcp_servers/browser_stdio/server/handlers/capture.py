"""
Screenshot handler: write a PNG to ``outputPath`` or return it as base64.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ...errors import CaptureFailure
from ..params import optional_str
from ..types import ToolResult
from .common import session_handle

if TYPE_CHECKING:
    from ...config import ServerConfig
    from ...sessions import SessionRegistry


def handle_take_screenshot(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    output_path = optional_str(args, "outputPath")
    png = session_handle(registry, args).capture()
    if not output_path:
        return ToolResult.text("Screenshot captured as base64:", base64.b64encode(png).decode("ascii"))

    target = Path(output_path).expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(png)
    except OSError as exc:
        raise CaptureFailure(f"Could not write {output_path}: {exc}") from exc
    return ToolResult.text(f"Screenshot saved to {output_path}")


CAPTURE_HANDLERS: dict[str, tuple] = {
    "take_screenshot": (handle_take_screenshot, "Error taking screenshot"),
}
