from __future__ import annotations

from inbox_digest.categories import CategoryTag
from inbox_digest.models import ClassifiedMessage
from inbox_digest.pipeline.policy import (
    label_paths_for,
    plan_thread_decisions,
    sanitize_label_segment,
)
from tests.fakes import make_message

PATHS = label_paths_for("LLM")


def classified(mid, thread_id, tags, site=None) -> ClassifiedMessage:
    return ClassifiedMessage(
        message=make_message(mid, thread_id=thread_id),
        categories=frozenset(tags),
        site_name=site,
    )


def test_label_paths_are_rooted_at_prefix() -> None:
    assert PATHS[CategoryTag.JOBS_SITES] == "LLM/Jobs/Sites"
    assert PATHS[CategoryTag.UNKNOWN] == "LLM/Unknown"
    assert label_paths_for("/Mail/")[CategoryTag.SCHOOL] == "Mail/School"


def test_thread_unions_categories_and_sites() -> None:
    decisions = plan_thread_decisions(
        [
            classified("m1", "t1", {CategoryTag.JOBS_SITES}, "LinkedIn"),
            classified("m2", "t1", {CategoryTag.JOBS_INTERVIEW}, "Indeed"),
            classified("m3", "t1", {CategoryTag.JOBS_SITES}, "LinkedIn"),
        ],
        PATHS,
    )

    [d] = decisions
    assert d.categories == {CategoryTag.JOBS_SITES, CategoryTag.JOBS_INTERVIEW}
    assert d.site_names == ("LinkedIn", "Indeed")
    assert d.label_paths == (
        "LLM/Jobs/Sites",
        "LLM/Jobs/Interview",
        "LLM/Jobs/Sites/LinkedIn",
        "LLM/Jobs/Sites/Indeed",
    )
    assert d.message_ids == ("m1", "m2", "m3")


def test_unknown_is_never_combined_with_a_concrete_label() -> None:
    [d] = plan_thread_decisions(
        [
            classified("m1", "t1", {CategoryTag.UNKNOWN}),
            classified("m2", "t1", {CategoryTag.SCHOOL}),
        ],
        PATHS,
    )
    assert d.label_paths == ("LLM/School",)


def test_thread_with_nothing_gets_unknown() -> None:
    [d] = plan_thread_decisions([classified("m1", "t1", set())], PATHS)
    assert d.label_paths == ("LLM/Unknown",)


def test_site_sublabels_require_jobs_sites() -> None:
    [d] = plan_thread_decisions([classified("m1", "t1", {CategoryTag.JOBS_INTERVIEW}, "Lever")], PATHS)
    assert d.label_paths == ("LLM/Jobs/Interview",)


def test_threads_keep_first_seen_order() -> None:
    decisions = plan_thread_decisions(
        [
            classified("m1", "b", {CategoryTag.ADS}),
            classified("m2", "a", {CategoryTag.ADS}),
            classified("m3", "b", {CategoryTag.SCHOOL}),
        ],
        PATHS,
    )
    assert [d.thread_id for d in decisions] == ["b", "a"]
    assert decisions[0].label_paths == ("LLM/Ads", "LLM/School")


def test_site_names_are_sanitized_for_label_paths() -> None:
    assert sanitize_label_segment("Wellfound/AngelList <jobs>!") == "WellfoundAngelList jobs"
    assert sanitize_label_segment("  Dice   .com ") == "Dice .com"
    assert sanitize_label_segment("***") == ""

    [d] = plan_thread_decisions(
        [
            classified("m1", "t1", {CategoryTag.JOBS_SITES}, "Zip/Recruiter"),
            classified("m2", "t1", {CategoryTag.JOBS_SITES}, "%%%"),
        ],
        PATHS,
    )
    assert d.label_paths == ("LLM/Jobs/Sites", "LLM/Jobs/Sites/ZipRecruiter")


def test_site_names_differing_only_in_case_share_one_label() -> None:
    [d] = plan_thread_decisions(
        [
            classified("m1", "t1", {CategoryTag.JOBS_SITES}, "LinkedIn"),
            classified("m2", "t1", {CategoryTag.JOBS_SITES}, "Linkedin"),
        ],
        PATHS,
    )
    assert d.site_names == ("LinkedIn",)
    assert d.label_paths == ("LLM/Jobs/Sites", "LLM/Jobs/Sites/LinkedIn")
