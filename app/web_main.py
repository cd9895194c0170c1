from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, cast

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, ORJSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from app.backend import (
    BackendFactory,
    BackendLease,
    BackendRegistry,
    SharedBackend,
    get_backend_registry,
)
from app.config import AppSettings, load_settings
from app.logging_setup import bind_request_context, configure_logging, reset_request_context
from app.session import SessionInstance, SessionInstanceFactory, SessionStore
from app.web_i18n import (
    DEFAULT_UI_LANGUAGE,
    UILocalizer,
    build_language_switch_url,
    language_label,
    preferred_content_language,
)
from domain.models import Sentence
from domain.pages import ComposedPage, details_page_ref
from domain.services.compose_details_page import (
    compose_details_page,
    compose_translations_page,
)
from domain.services.normalize_request import PassThrough, Redirect, normalize_request
from domain.services.resolve_parameters import LOG_DIR_KEY, resolve_parameters

TEMPLATES_DIR = Path(__file__).parent / "web" / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
logger = logging.getLogger(__name__)

ENTRY_PATH = "/"
UNGUARDED_PATHS = frozenset({"/api/health"})
SESSIONLESS_PATH_PREFIX = "/api/"


@dataclass(frozen=True)
class WikiContext:
    settings: AppSettings
    parameters: dict[str, str]
    lease: BackendLease | None
    registry: BackendRegistry
    sessions: SessionStore = field(default_factory=SessionStore)
    session_factory: SessionInstanceFactory = field(default_factory=SessionInstanceFactory)

    @property
    def backend(self) -> SharedBackend:
        if self.lease is None:
            raise HTTPException(status_code=503, detail="Backend unavailable")
        return self.lease.backend


def acquire_backend(
    settings: AppSettings,
    parameters: dict[str, str],
    registry: BackendRegistry,
    *,
    cancel: threading.Event | None = None,
    backend_factory: BackendFactory | None = None,
) -> BackendLease | None:
    wiki = settings.wiki
    factory = backend_factory or partial(SharedBackend, s3=wiki.s3)
    if wiki.backend and wiki.provide_backend:
        return registry.provide(wiki.backend, parameters, backend_factory=factory)
    return registry.acquire(
        wiki.backend,
        parameters,
        cancel=cancel,
        timeout=wiki.backend_wait_timeout_seconds,
        backend_factory=factory,
    )


def release_backend(context: WikiContext) -> None:
    lease = context.lease
    if lease is None or not lease.owned:
        return
    if lease.name:
        context.registry.unpublish(lease.name)
    lease.backend.close()
    logger.info("Backend closed: %s", lease.name or "(unnamed)")


def create_app(
    settings: AppSettings,
    *,
    registry: BackendRegistry | None = None,
    cancel: threading.Event | None = None,
    backend_factory: BackendFactory | None = None,
) -> FastAPI:
    parameters = resolve_parameters(settings.wiki.instance_params, settings.wiki.context_params)
    if settings.wiki.file_logging:
        configure_logging(Path(parameters[LOG_DIR_KEY]))

    registry = registry or get_backend_registry()
    lease = acquire_backend(
        settings,
        parameters,
        registry,
        cancel=cancel,
        backend_factory=backend_factory,
    )
    context = WikiContext(
        settings=settings,
        parameters=parameters,
        lease=lease,
        registry=registry,
        sessions=SessionStore(
            max_sessions=settings.wiki.max_sessions,
            idle_timeout_seconds=settings.wiki.session_idle_timeout_seconds,
        ),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        yield
        release_backend(context)

    app = FastAPI(title=settings.wiki.title, lifespan=lifespan)
    app.state.context = context

    def render_wiki_template(
        request: Request,
        template_name: str,
        template_context: dict[str, Any],
        status_code: int = 200,
    ) -> HTMLResponse:
        session = cast(SessionInstance | None, getattr(request.state, "session", None))
        language = session.language if session else DEFAULT_UI_LANGUAGE
        languages = session.content_languages if session else []
        localizer = UILocalizer(language=language, overrides=settings.wiki.ui_text_overrides)
        context_data = dict(template_context)
        context_data.update(
            {
                "request": request,
                "settings": settings,
                "lang": language,
                "t": localizer.t,
                "language_label": language_label,
                "other_languages": [item for item in languages if item != language],
            }
        )
        return templates.TemplateResponse(
            request, template_name, context_data, status_code=status_code
        )

    def render_sentence_page(request: Request, page: ComposedPage) -> HTMLResponse:
        session = require_session(request)
        session.navigate(page.ref)
        previous = session.history[-2] if len(session.history) > 1 else None
        return render_wiki_template(
            request,
            "sentence_page.html",
            {
                "page": page,
                "back_label": (
                    previous.label(session.backend.repository, session.content_languages)
                    if previous
                    else None
                ),
                "switch_url": partial(build_language_switch_url, page=page.ref.sentence_id),
            },
        )

    def render_details(request: Request, sentence: Sentence) -> HTMLResponse:
        session = require_session(request)
        page = compose_details_page(
            sentence, session.language, session.backend.is_multilingual
        )
        return render_sentence_page(request, page)

    @app.middleware("http")
    async def session_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = uuid.uuid4().hex[:12]
        path = request.url.path
        if context.lease is None:
            if path in UNGUARDED_PATHS:
                return await call_next(request)
            return render_wiki_template(request, "unavailable.html", {}, status_code=503)

        lease = context.lease
        cookie_name = settings.wiki.session_cookie_name
        cookie_value = request.cookies.get(cookie_name)
        session: SessionInstance | None = None
        is_new = False
        tokens = dict(bind_request_context(request_id=request_id))
        try:
            if path.startswith(SESSIONLESS_PATH_PREFIX):
                session = context.sessions.get(cookie_value)
            else:
                session, is_new = context.sessions.get_or_create(
                    cookie_value,
                    lambda: context.session_factory.create(
                        lease.backend,
                        lease.parameters,
                        language=preferred_content_language(
                            request.headers.get("accept-language", ""), lease.backend.languages
                        ),
                    ),
                )
            request.state.session = session
            if session is not None:
                tokens.update(bind_request_context(session_id=session.session_id))

            response: Response
            if path == ENTRY_PATH and request.method in {"GET", "HEAD"}:
                outcome = normalize_request(request.query_params, session_is_new=is_new)
                if isinstance(outcome, Redirect):
                    logger.info("Redirecting entry request to %s", outcome.url)
                    response = RedirectResponse(url=outcome.url, status_code=302)
                else:
                    request.state.navigation = outcome
                    response = await call_next(request)
            else:
                response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed: %s %s (request_id=%s, session_id=%s)",
                request.method,
                path,
                request_id,
                session.session_id if session else "-",
            )
            raise
        finally:
            reset_request_context(tokens)

        if is_new and session is not None:
            response.set_cookie(
                key=cookie_name,
                value=session.session_id,
                httponly=True,
                samesite="lax",
                path="/",
            )
        return response

    @app.get("/", response_class=HTMLResponse)
    def index(
        request: Request,
        context: WikiContext = Depends(get_context),
    ) -> HTMLResponse:
        session = require_session(request)
        navigation = cast(PassThrough, getattr(request.state, "navigation", PassThrough()))
        if navigation.lang is not None and not session.switch_language(navigation.lang):
            logger.info("Ignoring unsupported language: %s", navigation.lang)
        if navigation.page:
            return render_details(request, find_sentence(context, navigation.page))

        repository = context.backend.repository
        sentences = [
            sentence
            for sentence_id in repository.sentence_ids()
            if (sentence := repository.get(sentence_id)) is not None
        ]
        return render_wiki_template(
            request,
            "start.html",
            {
                "sentences": sentences,
                "sentence_url": lambda sentence_id: details_page_ref(sentence_id).url,
                "switch_url": build_language_switch_url,
            },
        )

    @app.get("/sentences/{sentence_id:path}/translations", response_class=HTMLResponse)
    def sentence_translations(
        request: Request,
        sentence_id: str,
        context: WikiContext = Depends(get_context),
    ) -> HTMLResponse:
        if not context.backend.is_multilingual:
            raise HTTPException(status_code=404, detail="Translations not available")
        session = require_session(request)
        sentence = find_sentence(context, sentence_id)
        page = compose_translations_page(sentence, session.language, session.content_languages)
        return render_sentence_page(request, page)

    @app.get("/sentences/{sentence_id:path}", response_class=HTMLResponse)
    def sentence_details(
        request: Request,
        sentence_id: str,
        context: WikiContext = Depends(get_context),
    ) -> HTMLResponse:
        return render_details(request, find_sentence(context, sentence_id))

    @app.get("/history/back")
    def history_back(request: Request) -> RedirectResponse:
        session = require_session(request)
        previous = session.back()
        return RedirectResponse(url=previous.url if previous else "/", status_code=303)

    @app.get("/api/sentences/{sentence_id:path}/details")
    def api_sentence_details(
        request: Request,
        sentence_id: str,
        lang: str | None = Query(default=None),
        context: WikiContext = Depends(get_context),
    ) -> ORJSONResponse:
        session = cast(SessionInstance | None, getattr(request.state, "session", None))
        sentence = find_sentence(context, sentence_id)
        languages = context.backend.languages
        if lang in languages:
            language = lang
        elif session is not None:
            language = session.language
        else:
            language = languages[0]
        page = compose_details_page(sentence, language, context.backend.is_multilingual)
        return ORJSONResponse(content=page.to_dict())

    @app.get("/api/health")
    def api_health(context: WikiContext = Depends(get_context)) -> ORJSONResponse:
        lease = context.lease
        if lease is None:
            return ORJSONResponse(
                status_code=503,
                content={"status": "unavailable", "backend": context.settings.wiki.backend},
            )
        return ORJSONResponse(
            content={
                "status": "ok",
                "backend": lease.name,
                "engine": lease.backend.engine.kind,
                "languages": list(lease.backend.languages),
                "sessions": len(context.sessions),
            }
        )

    return app


def get_context(request: Request) -> WikiContext:
    return cast(WikiContext, request.app.state.context)


def require_session(request: Request) -> SessionInstance:
    session = getattr(request.state, "session", None)
    if not isinstance(session, SessionInstance):
        raise HTTPException(status_code=503, detail="Backend unavailable")
    return session


def find_sentence(context: WikiContext, sentence_id: str) -> Sentence:
    sentence = context.backend.repository.get(sentence_id)
    if sentence is None:
        raise HTTPException(status_code=404, detail="Sentence not found")
    return sentence


def create_default_app() -> FastAPI:
    return create_app(load_settings())
