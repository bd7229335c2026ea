"""Server package: framing, catalog, dispatch and tool handlers."""
