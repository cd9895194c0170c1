from __future__ import annotations

from collections.abc import Mapping
from typing import Final

CONTEXT_PREFIX: Final[str] = "context:"

ENGINE_COMMAND_KEY: Final[str] = f"{CONTEXT_PREFIX}apecommand"
LOG_DIR_KEY: Final[str] = f"{CONTEXT_PREFIX}logdir"
DATA_DIR_KEY: Final[str] = f"{CONTEXT_PREFIX}datadir"

DEFAULT_PARAMETERS: Final[dict[str, str]] = {
    ENGINE_COMMAND_KEY: "ape.exe",
    LOG_DIR_KEY: "logs",
    DATA_DIR_KEY: "data",
}


def context_key(name: str) -> str:
    return f"{CONTEXT_PREFIX}{name}"


def resolve_parameters(
    instance_params: Mapping[str, str] | None,
    context_params: Mapping[str, str] | None,
) -> dict[str, str]:
    """Build the effective parameter mapping of one application.

    Deployment-context parameters are stored under ``context:<key>`` so they
    never collide with instance parameters; defaults only fill keys that no
    source supplied.
    """
    resolved: dict[str, str] = {}
    for key, value in (context_params or {}).items():
        resolved[context_key(str(key))] = str(value)
    for key, value in (instance_params or {}).items():
        resolved[str(key)] = str(value)
    for key, value in DEFAULT_PARAMETERS.items():
        resolved.setdefault(key, value)
    return resolved


def merge_backend_parameters(
    backend_params: Mapping[str, str],
    instance_params: Mapping[str, str],
) -> dict[str, str]:
    merged = dict(backend_params)
    merged.update(instance_params)
    return merged
