from __future__ import annotations

from typing import Protocol


class EngineError(RuntimeError):
    pass


class EngineClient(Protocol):
    kind: str

    def parse(self, text: str, language: str = "en") -> str: ...

    def close(self) -> None: ...
