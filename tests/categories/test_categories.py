from __future__ import annotations

import pytest

from inbox_digest.categories import CategoryTag, normalize_categories, normalize_category, ordered


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Jobs/Sites", CategoryTag.JOBS_SITES),
        ("jobs/sites", CategoryTag.JOBS_SITES),
        ("  JOBS / SITES ", CategoryTag.JOBS_SITES),
        ("Jobs/LinkedIn", CategoryTag.JOBS_SITES),
        ("Interview", CategoryTag.JOBS_INTERVIEW),
        ("External/AcademicReview", CategoryTag.EXTERNAL_ACADEMIC_REVIEW),
        ("Advertising", CategoryTag.ADS),
        ("School", CategoryTag.SCHOOL),
        ("Newsletter-ish", CategoryTag.UNKNOWN),
        ("", CategoryTag.UNKNOWN),
        (None, CategoryTag.UNKNOWN),
    ],
)
def test_normalize_category_maps_to_closed_vocabulary(raw, expected) -> None:
    assert normalize_category(raw) is expected


@pytest.mark.parametrize(
    "values",
    [[], [""], ["garbage"], [None], ["Unknown", "unknown"], ["School", "Unknown"], ["Ads"]],
)
def test_normalize_categories_is_never_empty(values) -> None:
    assert len(normalize_categories(values)) >= 1


def test_normalize_categories_empty_becomes_unknown() -> None:
    assert normalize_categories([]) == {CategoryTag.UNKNOWN}


def test_normalize_categories_drops_unknown_next_to_concrete_tags() -> None:
    assert normalize_categories(["School", "Unknown", "bogus"]) == {CategoryTag.SCHOOL}


def test_ordered_follows_declaration_order() -> None:
    tags = {CategoryTag.UNKNOWN, CategoryTag.SCHOOL, CategoryTag.ADS}
    assert ordered(tags) == [CategoryTag.ADS, CategoryTag.SCHOOL, CategoryTag.UNKNOWN]
