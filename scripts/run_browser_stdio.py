#!/usr/bin/env python3
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

print(
    f"[browser-stdio] chromium={os.environ.get('MCP_BROWSER_BINARY', 'auto')} | "
    f"firefox={os.environ.get('MCP_FIREFOX_BINARY', 'auto')} | "
    f"element_timeout_ms={os.environ.get('MCP_ELEMENT_TIMEOUT_MS', '10000')} | "
    f"log_level={os.environ.get('MCP_LOG_LEVEL', 'INFO')}",
    file=sys.stderr,
)

from mcp_servers.browser_stdio.main import main  # noqa: E402

if __name__ == "__main__":
    main()
