from __future__ import annotations

import logging
import secrets
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from app.backend import SharedBackend
from app.backend_wiring import ontology_name
from domain.pages import PageRef

logger = logging.getLogger(__name__)

MAX_HISTORY_LENGTH = 50
DEFAULT_MAX_SESSIONS = 10_000
DEFAULT_IDLE_TIMEOUT_SECONDS = 30 * 60.0


def new_session_id() -> str:
    return secrets.token_urlsafe(18)


@dataclass
class SessionInstance:
    session_id: str
    backend: SharedBackend
    parameters: dict[str, str]
    language: str
    history: list[PageRef] = field(default_factory=list)

    @property
    def ontology(self) -> str:
        return ontology_name(self.parameters)

    @property
    def content_languages(self) -> list[str]:
        return list(self.backend.languages)

    @property
    def current_page(self) -> PageRef | None:
        return self.history[-1] if self.history else None

    def switch_language(self, language: str | None) -> bool:
        if not language or language not in self.backend.languages:
            return False
        self.language = language
        return True

    def navigate(self, ref: PageRef) -> None:
        if self.history and self.history[-1] == ref:
            return
        self.history.append(ref)
        del self.history[:-MAX_HISTORY_LENGTH]

    def back(self) -> PageRef | None:
        if len(self.history) < 2:
            return None
        self.history.pop()
        return self.history[-1]


class SessionInstanceFactory:
    def create(
        self,
        backend: SharedBackend,
        parameters: Mapping[str, str],
        *,
        session_id: str | None = None,
        language: str | None = None,
    ) -> SessionInstance:
        instance = SessionInstance(
            session_id=session_id or new_session_id(),
            backend=backend,
            parameters=dict(parameters),
            language=language if language in backend.languages else backend.languages[0],
        )
        logger.info("New session instance: %s", instance.ontology)
        return instance


class SessionStore:
    """Sessions keyed by id, least recently used first.

    Sessions idle longer than ``idle_timeout_seconds`` are dropped, and the
    oldest ones are evicted once ``max_sessions`` is exceeded. Both happen on
    :meth:`get_or_create`.
    """

    def __init__(
        self,
        *,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_sessions = max_sessions
        self.idle_timeout_seconds = idle_timeout_seconds
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[SessionInstance, float]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str | None) -> SessionInstance | None:
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None or self._is_expired(entry[1], self._clock()):
                return None
            return entry[0]

    def get_or_create(
        self,
        session_id: str | None,
        create: Callable[[], SessionInstance],
    ) -> tuple[SessionInstance, bool]:
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            entry = self._sessions.get(session_id) if session_id else None
            if entry is not None:
                self._sessions[entry[0].session_id] = (entry[0], now)
                self._sessions.move_to_end(entry[0].session_id)
                return entry[0], False
            instance = create()
            self._sessions[instance.session_id] = (instance, now)
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("Evicted session %s", evicted_id)
            return instance, True

    def discard(self, session_id: str) -> SessionInstance | None:
        with self._lock:
            entry = self._sessions.pop(session_id, None)
            return entry[0] if entry else None

    def _is_expired(self, last_seen: float, now: float) -> bool:
        return now - last_seen > self.idle_timeout_seconds

    def _evict_expired(self, now: float) -> None:
        while self._sessions:
            session_id, (_, last_seen) = next(iter(self._sessions.items()))
            if not self._is_expired(last_seen, now):
                break
            del self._sessions[session_id]
            logger.info("Expired session %s", session_id)
