"""
tests/test_resolver.py

AddressResolver driven against a fake search page.
"""

from __future__ import annotations

import pytest

from app.config import NadlanScrapingSettings
from app.scraping.errors import SearchInputNotFoundError
from app.scraping.resolver import (
    AddressResolver,
    build_search_queries,
    extract_address_id,
    filter_suggestions,
)
from tests.fakes import FakeSearchPage, session_factory_for

BASE = "https://www.nadlan.gov.il"


def _resolver(page: FakeSearchPage) -> AddressResolver:
    return AddressResolver(
        settings=NadlanScrapingSettings(base_url=BASE),
        session_factory=session_factory_for(page),
    )


def test_query_variants_in_order() -> None:
    assert build_search_queries(city_name="תל אביב", street="דיזנגוף", house_number="100") == [
        "דיזנגוף 100 תל אביב",
        "תל אביב דיזנגוף 100",
        "דיזנגוף 100",
    ]


def test_filter_suggestions_requires_street_house_and_city() -> None:
    texts = [
        "דיזנגוף 100, תל אביב יפו",
        "דיזנגוף 100, תל אביב יפו",
        "דיזנגוף 12, תל אביב יפו",
        "דיזנגוף 100, אילת",
        "תל",
        "",
        "DIZENGOFF 100 תל אביב",
    ]

    assert filter_suggestions(texts, street="דיזנגוף", house_number="100", city_name="תל אביב") == [
        "דיזנגוף 100, תל אביב יפו",
    ]
    assert filter_suggestions(texts, street="dizengoff", house_number="100", city_name="תל אביב") == [
        "DIZENGOFF 100 תל אביב",
    ]


def test_filter_suggestions_without_city() -> None:
    assert filter_suggestions(["הרצל 5, חיפה"], street="הרצל", house_number="5", city_name=None) == [
        "הרצל 5, חיפה"
    ]


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (f"{BASE}/?view=address&id=123456", "123456"),
        (f"{BASE}/?id=77&view=settlement", "77"),
        (f"{BASE}/?view=address", None),
        ("", None),
    ],
)
def test_extract_address_id(url: str, expected: str | None) -> None:
    assert extract_address_id(url) == expected


def test_resolves_through_matching_suggestion() -> None:
    suggestion = "דיזנגוף 100, תל אביב יפו"
    page = FakeSearchPage(
        suggestions={"דיזנגוף 100 תל אביב": ["דיזנגוף 10, תל אביב יפו", suggestion]},
        suggestion_urls={suggestion: f"{BASE}/?view=address&id=555"},
    )

    address_id = _resolver(page).resolve(city_name="תל אביב", street="דיזנגוף", house_number="100")

    assert address_id == "555"
    assert page.clicked_suggestions == [suggestion]
    assert page.queries == ["דיזנגוף 100 תל אביב"]
    assert page.visited == [f"{BASE}/"]


def test_falls_back_to_enter_on_later_variant() -> None:
    page = FakeSearchPage(enter_results={"תל אביב דיזנגוף 100": f"{BASE}/?view=address&id=42"})

    address_id = _resolver(page).resolve(city_name="תל אביב", street="דיזנגוף", house_number="100")

    assert address_id == "42"
    assert page.queries == ["דיזנגוף 100 תל אביב", "תל אביב דיזנגוף 100"]


def test_unresolvable_address_returns_none() -> None:
    page = FakeSearchPage(suggestions={"אין 1 כלום": ["משהו אחר לגמרי"]})

    assert _resolver(page).resolve(city_name="כלום", street="אין", house_number="1") is None
    assert len(page.queries) == 3


def test_missing_search_input_raises() -> None:
    page = FakeSearchPage(has_input=False)

    with pytest.raises(SearchInputNotFoundError):
        _resolver(page).resolve(city_name="תל אביב", street="דיזנגוף", house_number="100")
    assert page.keyboard.pressed.count("Escape") == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"city_name": " ", "street": "דיזנגוף", "house_number": "100"},
        {"city_name": "תל אביב", "street": "", "house_number": "100"},
        {"city_name": "תל אביב", "street": "דיזנגוף", "house_number": "  "},
    ],
)
def test_blank_inputs_are_rejected(kwargs: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        _resolver(FakeSearchPage()).resolve(**kwargs)
