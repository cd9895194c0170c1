from __future__ import annotations

import shlex
import socket
import subprocess

import httpx

from domain.ports.engine import EngineClient, EngineError

DEFAULT_TIMEOUT_SECONDS = 30.0
_SOCKET_CHUNK_SIZE = 65536


class ProcessEngineClient(EngineClient):
    kind = "local"

    def __init__(self, command: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.command = command
        self.timeout_seconds = timeout_seconds

    def parse(self, text: str, language: str = "en") -> str:
        args = [*shlex.split(self.command), "-text", text]
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            msg = f"Parser engine command failed: {self.command}"
            raise EngineError(msg) from exc
        if result.returncode != 0:
            msg = f"Parser engine exited with code {result.returncode}: {result.stderr.strip()}"
            raise EngineError(msg)
        return result.stdout

    def close(self) -> None:
        return None


class SocketEngineClient(EngineClient):
    kind = "socket"

    def __init__(
        self,
        port: int,
        host: str = "localhost",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout_seconds = timeout_seconds

    def parse(self, text: str, language: str = "en") -> str:
        request = f"get([text={text!r}]).\n".encode()
        try:
            with socket.create_connection(
                (self.host, self.port), timeout=self.timeout_seconds
            ) as conn:
                conn.sendall(request)
                conn.shutdown(socket.SHUT_WR)
                chunks: list[bytes] = []
                while True:
                    chunk = conn.recv(_SOCKET_CHUNK_SIZE)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except OSError as exc:
            msg = f"Parser engine socket {self.host}:{self.port} unreachable"
            raise EngineError(msg) from exc
        return b"".join(chunks).decode("utf-8")

    def close(self) -> None:
        return None


class HttpEngineClient(EngineClient):
    kind = "webservice"

    def __init__(
        self,
        server_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self.server_url = server_url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def parse(self, text: str, language: str = "en") -> str:
        try:
            response = self._client.get(
                self.server_url, params={"text": text, "language": language}
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            msg = f"Parser engine web service failed: {self.server_url}"
            raise EngineError(msg) from exc
        return response.text

    def close(self) -> None:
        self._client.close()
