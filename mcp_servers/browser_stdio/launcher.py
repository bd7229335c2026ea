from __future__ import annotations

import contextlib
import json
import shutil
import socket
import subprocess
import tempfile
import time
from dataclasses import dataclass, field
from urllib.error import URLError
from urllib.request import Request, urlopen

from .errors import LaunchFailure


@dataclass
class ChromiumProcess:
    """A launcher-owned Chromium process with its CDP port and throwaway profile."""

    command: list[str]
    process: subprocess.Popen
    port: int
    profile_dir: str
    targets: list[dict] = field(default_factory=list)


class ChromiumLauncher:
    def __init__(self, binary_path: str, *, extra_flags: list[str] | None = None, timeout: float = 15.0) -> None:
        self.binary_path = binary_path
        self.extra_flags = list(extra_flags or [])
        self.timeout = timeout

    @staticmethod
    def find_free_port() -> int:
        with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
            s.bind(("127.0.0.1", 0))
            return s.getsockname()[1]

    def build_launch_command(
        self, port: int, profile_dir: str, *, headless: bool, extra: list[str] | None = None
    ) -> list[str]:
        flags = [
            f"--remote-debugging-port={port}",
            f"--user-data-dir={profile_dir}",
            "--remote-allow-origins=*",
            "--no-first-run",
            "--no-default-browser-check",
            "--disable-fre",
        ]
        if headless:
            flags.append("--headless=new")
        flags.extend(self.extra_flags)
        if extra:
            flags.extend(extra)
        return [self.binary_path, *flags, "about:blank"]

    @staticmethod
    def cdp_ready(port: int, timeout: float = 0.4) -> bool:
        """Return True if the CDP HTTP endpoint responds."""
        endpoint = f"http://127.0.0.1:{port}/json/version"
        try:
            with urlopen(endpoint, timeout=timeout) as resp:
                return resp.status == 200
        except (OSError, URLError):
            return False

    @staticmethod
    def list_targets(port: int, timeout: float = 0.5) -> list[dict]:
        endpoint = f"http://127.0.0.1:{port}/json/list"
        try:
            req = Request(endpoint, headers={"User-Agent": "browser-stdio"})
            with urlopen(req, timeout=timeout) as resp:
                payload = json.loads(resp.read().decode())
        except (OSError, URLError, ValueError):
            return []
        return payload if isinstance(payload, list) else []

    def launch(self, *, headless: bool, extra_args: list[str] | None = None) -> ChromiumProcess:
        port = self.find_free_port()
        profile_dir = tempfile.mkdtemp(prefix="browser-stdio-chromium-")
        cmd = self.build_launch_command(port, profile_dir, headless=headless, extra=extra_args)
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            shutil.rmtree(profile_dir, ignore_errors=True)
            raise LaunchFailure(f"Cannot start {self.binary_path}: {exc}") from exc

        owned = ChromiumProcess(command=cmd, process=proc, port=port, profile_dir=profile_dir)
        deadline = time.monotonic() + self.timeout
        while time.monotonic() < deadline:
            if proc.poll() is not None:
                self.stop(owned)
                raise LaunchFailure(f"Chromium exited during startup (code {proc.returncode})")
            if self.cdp_ready(port):
                pages = [t for t in self.list_targets(port) if t.get("type") == "page" and t.get("webSocketDebuggerUrl")]
                if pages:
                    owned.targets = pages
                    return owned
            time.sleep(0.1)

        self.stop(owned)
        raise LaunchFailure(f"Chromium did not expose CDP on port {port} within {self.timeout:.0f}s")

    @staticmethod
    def stop(owned: ChromiumProcess, *, timeout: float = 2.0) -> None:
        """Best-effort stop of the process, then remove its profile."""
        proc = owned.process
        if proc.poll() is None:
            with contextlib.suppress(Exception):
                proc.terminate()
            try:
                proc.wait(timeout=max(0.1, timeout))
            except subprocess.TimeoutExpired:
                with contextlib.suppress(Exception):
                    proc.kill()
                with contextlib.suppress(Exception):
                    proc.wait(timeout=timeout)
        shutil.rmtree(owned.profile_dir, ignore_errors=True)


__all__ = ["ChromiumLauncher", "ChromiumProcess"]
