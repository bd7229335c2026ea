"""
Stdio server for browser automation.

This module provides the entry point and the line protocol loop.
Tool dispatch is handled by server/dispatch.py.
"""

from __future__ import annotations

import functools
import json
import logging
import os
import signal
import sys
import threading
from typing import Any, BinaryIO

from .config import ServerConfig
from .drivers import launch_browser
from .errors import MalformedEnvelope
from .server import codec
from .server.catalog import handshake
from .server.dispatch import CommandDispatcher, create_default_dispatcher
from .server.redaction import redact_frame
from .sessions import SessionRegistry

logger = logging.getLogger("mcp.browser.stdio")

STATUS_URI_PREFIX = "browser-status://"

__all__ = ["STATUS_URI_PREFIX", "StdioServer", "main"]


def _envelope_payload(envelope: codec.Envelope) -> dict[str, Any]:
    if isinstance(envelope, codec.ToolCall):
        return {
            "type": codec.TOOL_CALL,
            "tool_call_id": envelope.tool_call_id,
            "name": envelope.name,
            "params": envelope.params,
        }
    return {"type": codec.RESOURCE_REQUEST, "request_id": envelope.request_id, "uri": envelope.uri}


class StdioServer:
    """Handshake, then one response line per decodable request, in order."""

    def __init__(
        self,
        config: ServerConfig,
        registry: SessionRegistry,
        dispatcher: CommandDispatcher,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.dispatcher = dispatcher
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer
        # Held for each dispatch+write cycle and by shutdown().
        self._lock = threading.Lock()
        self._closed = False
        self.stopped = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    def _dump(self, direction: str, line: bytes, payload: dict[str, Any] | None, tool: str | None = None) -> None:
        dump_path = self.config.dump_frames_path
        if not dump_path:
            return
        try:
            if dump_dir := os.path.dirname(dump_path):
                os.makedirs(dump_dir, exist_ok=True)
            with open(dump_path, "ab") as fp:
                fp.write(f"--{direction}--\n".encode())
                if self.config.dump_frames_raw:
                    fp.write(line.rstrip(b"\n") + b"\n")
                elif payload is None:
                    fp.write(f"<undecodable len={len(line)}>\n".encode())
                else:
                    fp.write((json.dumps(redact_frame(payload, tool=tool), ensure_ascii=False) + "\n").encode())
        except OSError as exc:
            logger.warning("frame_dump_failed path=%s error=%s", dump_path, exc)

    def _write(self, payload: dict[str, Any], tool: str | None = None) -> bool:
        """Write one envelope and flush; a failed write stops the server."""
        line = codec.encode(payload)
        self._dump("out", line, payload, tool)
        try:
            self._stdout.write(line)
            self._stdout.flush()
        except (OSError, ValueError) as exc:
            logger.error("stdout_write_failed error=%s", exc)
            self.stopped.set()
            return False
        return True

    def write_handshake(self) -> bool:
        return self._write(handshake())

    def handle_line(self, line: bytes) -> None:
        """Decode and answer one input line. Malformed lines get no response."""
        raw = line.strip()
        if not raw:
            return
        try:
            envelope = codec.decode(raw)
        except MalformedEnvelope as exc:
            logger.warning("malformed_envelope reason=%s", exc)
            self._dump("in", raw, None)
            return

        payload = _envelope_payload(envelope)
        self._dump("in", raw, payload)
        if self.config.trace:
            logger.info("recv %s", redact_frame(payload))

        with self._lock:
            if self._closed:
                logger.info("request_dropped reason=shutting_down")
                return
            if isinstance(envelope, codec.ToolCall):
                result = self.dispatcher.dispatch(envelope.name, envelope.params)
                self._write(codec.tool_response(envelope.tool_call_id, result.to_content_list()), tool=envelope.name)
            else:
                self._answer_resource(envelope)

    def _answer_resource(self, request: codec.ResourceRequest) -> None:
        if not request.uri.startswith(STATUS_URI_PREFIX):
            logger.info("resource_ignored uri=%s", request.uri)
            return
        session_id = request.uri[len(STATUS_URI_PREFIX) :].strip("/") or None
        text = self.registry.status_text(session_id)
        self._write(codec.resource_response(request.request_id, request.uri, text))

    def serve(self) -> None:
        """Run until end of input, a failed write, or ``stopped`` being set."""
        try:
            if not self.write_handshake():
                return
            logger.info("serving tools=%s", ",".join(self.dispatcher.tool_names))
            for line in iter(self._stdin.readline, b""):
                if self.stopped.is_set():
                    break
                self.handle_line(line)
            else:
                logger.info("stdin_closed")
        except Exception:
            logger.exception("serve_loop_failed")
        finally:
            self.stopped.set()

    def shutdown(self) -> int:
        """Stop accepting commands and close every session. Runs once; later calls return 0."""
        with self._lock:
            if self._closed:
                return 0
            self._closed = True
            self.stopped.set()
            count = self.registry.close_all()
        logger.info("server_stopped sessions_closed=%d", count)
        return count


def build_server(
    config: ServerConfig,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> StdioServer:
    registry = SessionRegistry(functools.partial(launch_browser, config=config))
    dispatcher = create_default_dispatcher(config, registry)
    return StdioServer(config, registry, dispatcher, stdin=stdin, stdout=stdout)


def main() -> None:
    """Main entry point for the stdio server."""
    config = ServerConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    server = build_server(config)

    def _on_signal(signum: int, _frame: Any) -> None:
        logger.info("signal_received signum=%d", signum)
        server.stopped.set()

    signal.signal(signal.SIGTERM, _on_signal)
    signal.signal(signal.SIGINT, _on_signal)

    worker = threading.Thread(target=server.serve, name="browser-stdio-loop", daemon=True)
    worker.start()
    try:
        # Short waits keep the main thread responsive to signals.
        while not server.stopped.wait(0.5):
            pass
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
