from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final
from urllib.parse import urlencode

EXTERNAL_PAGE_PARAM: Final[str] = "showpage"
EXTERNAL_LANGUAGE_PARAM: Final[str] = "showlang"
PAGE_PARAM: Final[str] = "page"
LANGUAGE_PARAM: Final[str] = "lang"
SESSION_PARAM: Final[str] = "sid"

EXTERNAL_EVENT_SID: Final[str] = "ExternalEvent"
CANONICAL_BASE_URL: Final[str] = "."


@dataclass(frozen=True)
class Redirect:
    url: str


@dataclass(frozen=True)
class PassThrough:
    page: str | None = None
    lang: str | None = None


NormalizedRequest = Redirect | PassThrough


def normalize_request(
    params: Mapping[str, str],
    *,
    session_is_new: bool,
) -> NormalizedRequest:
    """Decide how an incoming entry request is handled.

    ``showpage``/``showlang`` are the public deep-link forms of the internal
    ``page``/``lang`` parameters. Joining an existing session through a deep
    link restarts navigation with an external event; a bare entry carrying
    only internal parameters is sent back to the canonical base.
    """
    staged: list[tuple[str, str]] = []
    external_page = params.get(EXTERNAL_PAGE_PARAM)
    if external_page is not None:
        staged.append((PAGE_PARAM, external_page))
    external_lang = params.get(EXTERNAL_LANGUAGE_PARAM)
    if external_lang is not None:
        staged.append((LANGUAGE_PARAM, external_lang))

    has_internal_params = PAGE_PARAM in params or LANGUAGE_PARAM in params

    if not session_is_new and staged:
        query = urlencode([(SESSION_PARAM, EXTERNAL_EVENT_SID), *staged])
        return Redirect(url=f"?{query}")
    if not staged and has_internal_params and SESSION_PARAM not in params:
        return Redirect(url=CANONICAL_BASE_URL)

    targets = dict(staged)
    return PassThrough(
        page=targets.get(PAGE_PARAM, params.get(PAGE_PARAM)),
        lang=targets.get(LANGUAGE_PARAM, params.get(LANGUAGE_PARAM)),
    )
