from __future__ import annotations

import html
import re
from datetime import date
from email.message import EmailMessage
from typing import Optional

from inbox_digest.digest.aggregate import DigestStats
from inbox_digest.parsing.parser import html_to_text

SUMMARY_UNAVAILABLE = "AI summary unavailable."


def digest_subject(prefix: str, day: date) -> str:
    return f"{prefix} - {day.isoformat()}"


def prose_to_html(prose: str) -> str:
    return html.escape(prose).replace("\r\n", "\n").replace("\n", "<br>\n")


def render_html(stats: DigestStats, prose: Optional[str], day: date, title: str) -> str:
    esc = html.escape
    rows = "\n".join(
        f"<tr><td>{esc(tag.value)}</td><td>{n}</td></tr>" for tag, n in stats.counts.items()
    )
    parts = [
        "<!DOCTYPE html>",
        "<html><body>",
        f"<h2>{esc(title)} ({day.isoformat()})</h2>",
        f"<p>Total messages: <b>{stats.total}</b></p>",
        "<h3>By category</h3>",
        "<table border=\"1\" cellpadding=\"4\" cellspacing=\"0\">",
        "<tr><th>Category</th><th>Count</th></tr>",
        rows,
        "</table>",
    ]
    if stats.top_sites:
        site_rows = "\n".join(
            f"<tr><td>{esc(site)}</td><td>{n}</td></tr>" for site, n in stats.top_sites
        )
        parts += [
            "<h3>Top job sites</h3>",
            "<table border=\"1\" cellpadding=\"4\" cellspacing=\"0\">",
            "<tr><th>Site</th><th>Count</th></tr>",
            site_rows,
            "</table>",
        ]
    parts += [
        "<h3>Summary</h3>",
        f"<p>{prose_to_html(prose) if prose else esc(SUMMARY_UNAVAILABLE)}</p>",
        "</body></html>",
    ]
    return "\n".join(parts)


def html_to_plain(document: str) -> str:
    text = html_to_text(document, separator="\n")
    return re.sub(r"\n{3,}", "\n\n", text)


def build_digest_message(*, sender: str, recipient: str, subject: str, html_body: str) -> EmailMessage:
    """Plain text as the primary body, HTML as the alternative."""
    msg = EmailMessage()
    if sender:
        # Gmail fills in the authenticated address when From is absent.
        msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(html_to_plain(html_body))
    msg.add_alternative(html_body, subtype="html")
    return msg


def build_notice_message(*, sender: str, recipient: str, subject: str, text: str) -> EmailMessage:
    msg = EmailMessage()
    if sender:
        # Gmail fills in the authenticated address when From is absent.
        msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(text)
    return msg
