from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from app.backend_wiring import build_engine_client, build_sentence_repository
from app.config import S3Settings
from domain.models import DEFAULT_CONTENT_LANGUAGE
from domain.ports.engine import EngineClient
from domain.ports.repositories import SentenceRepository
from domain.services.language_utils import parse_language_list
from domain.services.resolve_parameters import merge_backend_parameters

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 1.0


class BackendUnavailableError(RuntimeError):
    def __init__(self, name: str, timeout_seconds: float) -> None:
        self.name = name
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Backend {name!r} not available after {timeout_seconds:g}s")


class BackendAlreadyPublishedError(RuntimeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Backend already published: {name}")


class SharedBackend:
    def __init__(
        self,
        parameters: Mapping[str, str],
        *,
        repository: SentenceRepository | None = None,
        engine: EngineClient | None = None,
        s3: S3Settings | None = None,
    ) -> None:
        self._parameters = dict(parameters)
        self.repository = repository or build_sentence_repository(self._parameters, s3)
        self.engine = engine or build_engine_client(self._parameters)
        self.languages = (
            parse_language_list(self._parameters.get("languages"))
            or list(self.repository.languages())
            or [DEFAULT_CONTENT_LANGUAGE]
        )

    @property
    def parameters(self) -> dict[str, str]:
        return dict(self._parameters)

    @property
    def is_multilingual(self) -> bool:
        return len(self.languages) > 1

    def close(self) -> None:
        self.engine.close()


BackendFactory = Callable[[Mapping[str, str]], SharedBackend]


@dataclass(frozen=True)
class BackendLease:
    backend: SharedBackend
    parameters: dict[str, str]
    name: str | None = None
    owned: bool = False


class BackendRegistry:
    """Process-wide slots of shared backends, keyed by name.

    A name is published once. Readers block in :meth:`wait_for` until the slot
    is filled; the poll interval bounds how often a cancellation request is
    noticed while waiting.
    """

    def __init__(
        self,
        backend_factory: BackendFactory = SharedBackend,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._backend_factory = backend_factory
        self.poll_interval_seconds = poll_interval_seconds
        self._backends: dict[str, SharedBackend] = {}
        self._building: set[str] = set()
        self._condition = threading.Condition()

    def get(self, name: str) -> SharedBackend | None:
        with self._condition:
            return self._backends.get(name)

    def names(self) -> list[str]:
        with self._condition:
            return sorted(self._backends)

    def publish(self, name: str, backend: SharedBackend) -> None:
        with self._condition:
            if name in self._backends or name in self._building:
                raise BackendAlreadyPublishedError(name)
            self._backends[name] = backend
            self._condition.notify_all()
        logger.info("Published backend %s", name)

    def unpublish(self, name: str) -> SharedBackend | None:
        with self._condition:
            return self._backends.pop(name, None)

    def wait_for(
        self,
        name: str,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> SharedBackend | None:
        deadline = None if timeout is None else time.monotonic() + timeout
        timeout_seconds = timeout or 0.0
        with self._condition:
            while True:
                backend = self._backends.get(name)
                if backend is not None:
                    return backend
                if cancel is not None and cancel.is_set():
                    return None
                wait_seconds = self.poll_interval_seconds
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise BackendUnavailableError(name, timeout_seconds)
                    wait_seconds = min(wait_seconds, remaining)
                self._condition.wait(wait_seconds)

    def acquire(
        self,
        name: str | None,
        parameters: Mapping[str, str],
        *,
        backend_factory: BackendFactory | None = None,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> BackendLease | None:
        if not name:
            logger.info("Creating backend")
            backend = (backend_factory or self._backend_factory)(parameters)
            return BackendLease(backend=backend, parameters=dict(parameters), owned=True)

        logger.info("Using backend: %s", name)
        backend = self.wait_for(name, cancel=cancel, timeout=timeout)
        if backend is None:
            logger.info("Wait for backend %s cancelled", name)
            return None
        return BackendLease(
            backend=backend,
            parameters=merge_backend_parameters(backend.parameters, parameters),
            name=name,
        )

    def provide(
        self,
        name: str,
        parameters: Mapping[str, str],
        *,
        backend_factory: BackendFactory | None = None,
    ) -> BackendLease:
        with self._condition:
            while True:
                existing = self._backends.get(name)
                if existing is not None:
                    return BackendLease(
                        backend=existing,
                        parameters=merge_backend_parameters(existing.parameters, parameters),
                        name=name,
                    )
                if name not in self._building:
                    self._building.add(name)
                    break
                self._condition.wait(self.poll_interval_seconds)

        logger.info("Creating backend: %s", name)
        try:
            backend = (backend_factory or self._backend_factory)(parameters)
        except Exception:
            with self._condition:
                self._building.discard(name)
                self._condition.notify_all()
            raise

        with self._condition:
            self._building.discard(name)
            self._backends[name] = backend
            self._condition.notify_all()
        logger.info("Published backend %s", name)
        return BackendLease(backend=backend, parameters=dict(parameters), name=name, owned=True)


_registry: BackendRegistry | None = None
_registry_lock = threading.Lock()


def get_backend_registry() -> BackendRegistry:
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = BackendRegistry()
        return _registry


def reset_backend_registry() -> None:
    global _registry
    with _registry_lock:
        _registry = None
