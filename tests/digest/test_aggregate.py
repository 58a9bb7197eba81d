from __future__ import annotations

from inbox_digest.categories import CategoryTag
from inbox_digest.digest.aggregate import aggregate, digest_sample, top_sites
from inbox_digest.models import ClassifiedMessage
from tests.fakes import make_message


def item(mid, tags, site=None, subject="s") -> ClassifiedMessage:
    return ClassifiedMessage(
        message=make_message(mid, f"{mid}@example.org", subject),
        categories=frozenset(tags),
        site_name=site,
    )


JOBS = {CategoryTag.JOBS_SITES}


def test_counts_cover_every_category() -> None:
    stats = aggregate(
        [
            item("a", {CategoryTag.SCHOOL, CategoryTag.INTERNAL}),
            item("b", {CategoryTag.SCHOOL}),
            item("c", {CategoryTag.UNKNOWN}),
        ]
    )

    assert stats.total == 3
    assert list(stats.counts) == list(CategoryTag)
    assert stats.counts[CategoryTag.SCHOOL] == 2
    assert stats.counts[CategoryTag.INTERNAL] == 1
    assert stats.counts[CategoryTag.ADS] == 0


def test_top_sites_only_count_job_site_messages() -> None:
    ranked = top_sites(
        [
            item("a", JOBS, "Indeed"),
            item("b", JOBS, "LinkedIn"),
            item("c", JOBS, "LinkedIn"),
            item("d", {CategoryTag.JOBS_INTERVIEW}, "Indeed"),
            item("e", JOBS, None),
        ]
    )
    assert ranked == [("LinkedIn", 2), ("Indeed", 1)]


def test_top_sites_ties_keep_first_seen_order_and_truncate() -> None:
    classified = [item(f"m{i}", JOBS, f"Site{i}") for i in range(12)]
    classified.append(item("x", JOBS, "Site11"))

    ranked = top_sites(classified, limit=10)

    assert len(ranked) == 10
    assert ranked[0] == ("Site11", 2)
    assert [s for s, _ in ranked[1:]] == [f"Site{i}" for i in range(9)]


def test_no_job_sites_gives_empty_table() -> None:
    stats = aggregate([item("a", {CategoryTag.SCHOOL})])
    assert stats.top_sites == []
    assert stats.as_dict()["topSites"] == []


def test_digest_sample_is_bounded_and_reduced() -> None:
    classified = [item(f"m{i}", {CategoryTag.ADS, CategoryTag.SCHOOL}, subject=f"Subject {i}") for i in range(5)]
    sample = digest_sample(classified, size=3)

    assert len(sample) == 3
    assert sample[0] == {
        "from": "m0@example.org",
        "subject": "Subject 0",
        "category": "Ads, School",
        "site": None,
    }


def test_top_sites_merge_case_variants() -> None:
    ranked = top_sites([item("a", JOBS, "LinkedIn"), item("b", JOBS, "Linkedin"), item("c", JOBS, "Indeed")])
    assert ranked == [("LinkedIn", 2), ("Indeed", 1)]
