from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional


class CategoryTag(str, Enum):
    ADS = "Ads"
    JOBS_SITES = "Jobs/Sites"
    JOBS_INTERVIEW = "Jobs/Interview"
    SCHOOL = "School"
    INTERNAL = "Internal"
    EXTERNAL_WORK = "External/Work"
    EXTERNAL_PERSONAL = "External/Personal"
    EXTERNAL_ACADEMIC_REVIEW = "External/AcademicReview"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


# Lowercased lookup keys. Canonical values map to themselves; the rest are
# spellings the model (or older label sets) produce.
_ALIASES: Dict[str, CategoryTag] = {
    **{tag.value.lower(): tag for tag in CategoryTag},
    # Legacy per-site tags, folded into the generic job-site bucket.
    "jobs/linkedin": CategoryTag.JOBS_SITES,
    "jobs/indeed": CategoryTag.JOBS_SITES,
    "jobs/site": CategoryTag.JOBS_SITES,
    "jobsites": CategoryTag.JOBS_SITES,
    "job sites": CategoryTag.JOBS_SITES,
    "jobs": CategoryTag.JOBS_SITES,
    "jobs/application": CategoryTag.JOBS_INTERVIEW,
    "jobs/applications": CategoryTag.JOBS_INTERVIEW,
    "interview": CategoryTag.JOBS_INTERVIEW,
    "advertising": CategoryTag.ADS,
    "ad": CategoryTag.ADS,
    "promotions": CategoryTag.ADS,
    "external/review": CategoryTag.EXTERNAL_ACADEMIC_REVIEW,
    "external/academic review": CategoryTag.EXTERNAL_ACADEMIC_REVIEW,
    "academic review": CategoryTag.EXTERNAL_ACADEMIC_REVIEW,
    "review": CategoryTag.EXTERNAL_ACADEMIC_REVIEW,
    "school/university": CategoryTag.SCHOOL,
    "external": CategoryTag.EXTERNAL_WORK,
    "work": CategoryTag.EXTERNAL_WORK,
    "personal": CategoryTag.EXTERNAL_PERSONAL,
}


def normalize_category(value: Optional[str]) -> CategoryTag:
    """Map any category string onto the closed vocabulary. Total: unknown input -> Unknown."""
    if isinstance(value, CategoryTag):
        return value
    if not isinstance(value, str):
        return CategoryTag.UNKNOWN
    key = " ".join(value.strip().split()).lower()
    # Tolerate "Jobs / Sites" style spacing around separators.
    key = key.replace(" / ", "/").replace("/ ", "/").replace(" /", "/")
    return _ALIASES.get(key, CategoryTag.UNKNOWN)


def normalize_categories(values: Iterable[Optional[str]]) -> FrozenSet[CategoryTag]:
    """
    Normalize a collection of raw category strings.

    The result is never empty. Unknown only survives when nothing else does,
    so a message is never both Unknown and something concrete.
    """
    tags = {normalize_category(v) for v in values}
    concrete = tags - {CategoryTag.UNKNOWN}
    if concrete:
        return frozenset(concrete)
    return frozenset({CategoryTag.UNKNOWN})


def ordered(tags: Iterable[CategoryTag]) -> list[CategoryTag]:
    """Sort tags by declaration order of the enum."""
    present = set(tags)
    return [tag for tag in CategoryTag if tag in present]
