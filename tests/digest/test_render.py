from __future__ import annotations

from datetime import date

from inbox_digest.categories import CategoryTag
from inbox_digest.digest.aggregate import DigestStats
from inbox_digest.digest.render import (
    SUMMARY_UNAVAILABLE,
    build_digest_message,
    digest_subject,
    html_to_plain,
    render_html,
)

DAY = date(2025, 10, 13)


def stats(top_sites=()) -> DigestStats:
    counts = {tag: 0 for tag in CategoryTag}
    counts[CategoryTag.JOBS_SITES] = 3
    return DigestStats(total=3, counts=counts, top_sites=list(top_sites))


def test_digest_subject_uses_iso_date() -> None:
    assert digest_subject("LLM Email Digest", DAY) == "LLM Email Digest - 2025-10-13"


def test_prose_is_escaped_and_line_broken() -> None:
    html = render_html(stats(), "<b>Hi</b> & welcome\nsecond line", DAY, "Digest")

    assert "&lt;b&gt;Hi&lt;/b&gt; &amp; welcome<br>" in html
    assert "second line" in html
    assert "<b>Hi</b>" not in html


def test_missing_prose_renders_placeholder_but_keeps_stats() -> None:
    html = render_html(stats([("LinkedIn", 3)]), None, DAY, "Digest")

    assert SUMMARY_UNAVAILABLE in html
    assert "Total messages: <b>3</b>" in html
    assert "<td>LinkedIn</td><td>3</td>" in html


def test_top_sites_table_absent_when_empty() -> None:
    assert "Top job sites" not in render_html(stats(), "ok", DAY, "Digest")


def test_digest_message_has_plain_text_and_html_alternative() -> None:
    html = render_html(stats(), "All quiet.", DAY, "Digest")
    msg = build_digest_message(sender="me@corp.com", recipient="me@corp.com", subject="S", html_body=html)

    assert msg.is_multipart()
    assert "Digest (2025-10-13)" in msg.get_body(preferencelist=("plain",)).get_content()
    assert msg.get_body(preferencelist=("html",)).get_content().strip() == html.strip()
    plain = html_to_plain(html)
    assert "<" not in plain
    assert "All quiet." in plain
