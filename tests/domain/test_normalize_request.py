from __future__ import annotations

from domain.services.normalize_request import (
    CANONICAL_BASE_URL,
    PassThrough,
    Redirect,
    normalize_request,
)


def test_showpage_on_existing_session_redirects_to_external_event() -> None:
    outcome = normalize_request({"showpage": "Foo"}, session_is_new=False)

    assert outcome == Redirect(url="?sid=ExternalEvent&page=Foo")


def test_showpage_and_showlang_are_staged_in_order() -> None:
    outcome = normalize_request({"showlang": "de", "showpage": "Foo"}, session_is_new=False)

    assert outcome == Redirect(url="?sid=ExternalEvent&page=Foo&lang=de")


def test_staged_values_are_url_encoded() -> None:
    outcome = normalize_request({"showpage": "Foo Bar&Baz"}, session_is_new=False)

    assert outcome == Redirect(url="?sid=ExternalEvent&page=Foo+Bar%26Baz")


def test_showpage_on_new_session_passes_through_with_target() -> None:
    outcome = normalize_request({"showpage": "Foo"}, session_is_new=True)

    assert outcome == PassThrough(page="Foo", lang=None)


def test_internal_page_without_sid_redirects_to_canonical_base() -> None:
    assert normalize_request({"page": "Foo"}, session_is_new=True) == Redirect(
        url=CANONICAL_BASE_URL
    )
    assert normalize_request({"lang": "de"}, session_is_new=False) == Redirect(
        url=CANONICAL_BASE_URL
    )


def test_internal_params_with_sid_pass_through() -> None:
    outcome = normalize_request({"sid": "S1", "page": "Foo"}, session_is_new=False)

    assert outcome == PassThrough(page="Foo", lang=None)


def test_external_event_follow_up_passes_through() -> None:
    outcome = normalize_request(
        {"sid": "ExternalEvent", "page": "Foo", "lang": "de"}, session_is_new=False
    )

    assert outcome == PassThrough(page="Foo", lang="de")


def test_plain_entry_passes_through_without_targets() -> None:
    assert normalize_request({}, session_is_new=True) == PassThrough()
    assert normalize_request({"q": "x"}, session_is_new=False) == PassThrough()


def test_staged_value_wins_over_internal_value_on_new_session() -> None:
    outcome = normalize_request({"showpage": "Foo", "page": "Bar"}, session_is_new=True)

    assert outcome == PassThrough(page="Foo", lang=None)
