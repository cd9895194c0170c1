from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import orjson


def parse_json_bytes(raw: bytes) -> dict[str, Any]:
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        data = json.loads(raw.decode("utf-8-sig"))
    return data if isinstance(data, dict) else {}


def load_json(path: Path) -> dict[str, Any]:
    return parse_json_bytes(path.read_bytes())
