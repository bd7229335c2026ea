from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CHROMIUM_CANDIDATES: list[str] = [
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/local/bin/chromium",
    "/opt/chromium/chromium",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
    "C:\\Program Files\\Chromium\\Application\\chrome.exe",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
    "/opt/google/chrome/chrome",
    "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
    "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    # Snap builds ignore --user-data-dir in some setups; keep them last.
    "/snap/bin/chromium",
]

DEFAULT_ELEMENT_TIMEOUT_MS = 10_000


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class ServerConfig:
    chromium_binary: str
    firefox_binary: str | None = None
    extra_flags: list[str] = field(default_factory=list)
    launch_timeout: float = 15.0
    cdp_timeout: float = 10.0
    navigation_timeout: float = 30.0
    element_timeout_ms: int = DEFAULT_ELEMENT_TIMEOUT_MS
    log_level: str = "INFO"
    trace: bool = False
    dump_frames_path: str | None = None
    dump_frames_raw: bool = False

    @classmethod
    def detect_chromium_binary(cls) -> str:
        env_path = os.environ.get("MCP_BROWSER_BINARY")
        if env_path:
            return expand_path(env_path)
        for candidate in DEFAULT_CHROMIUM_CANDIDATES:
            path = Path(candidate)
            if path.exists() and os.access(str(path), os.X_OK):
                return str(path)
        # Last resort: rely on PATH lookup
        return "google-chrome"

    @classmethod
    def from_env(cls) -> ServerConfig:
        flags_raw = os.environ.get("MCP_BROWSER_FLAGS", "")
        extra_flags = [flag.strip() for flag in flags_raw.split(",") if flag.strip()]
        firefox = os.environ.get("MCP_FIREFOX_BINARY")
        element_timeout = int(_env_float("MCP_ELEMENT_TIMEOUT_MS", DEFAULT_ELEMENT_TIMEOUT_MS))
        dump_path = os.environ.get("MCP_DUMP_FRAMES") or None
        return cls(
            chromium_binary=cls.detect_chromium_binary(),
            firefox_binary=expand_path(firefox) if firefox else None,
            extra_flags=extra_flags,
            launch_timeout=max(1.0, _env_float("MCP_LAUNCH_TIMEOUT", 15.0)),
            cdp_timeout=max(0.5, _env_float("MCP_CDP_TIMEOUT", 10.0)),
            navigation_timeout=max(1.0, _env_float("MCP_NAV_TIMEOUT", 30.0)),
            element_timeout_ms=max(0, element_timeout),
            log_level=(os.environ.get("MCP_LOG_LEVEL") or "INFO").strip().upper(),
            trace=bool(os.environ.get("MCP_TRACE")),
            dump_frames_path=expand_path(dump_path) if dump_path else None,
            dump_frames_raw=os.environ.get("MCP_DUMP_FRAMES_RAW") == "1",
        )
