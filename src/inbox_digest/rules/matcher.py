from __future__ import annotations

from email.utils import parseaddr
from typing import Optional, Sequence

from inbox_digest.config.settings import SiteSignature


def sender_domain(from_header: str | None) -> str:
    """Lowercased domain of a From header ("Name <a@B.com>" -> "b.com"), or ""."""
    address = parseaddr(from_header or "")[1].strip()
    if "@" not in address:
        return ""
    return address.rsplit("@", 1)[1].strip().strip(">").lower()


def domain_matches(domain: str | None, candidates: Sequence[str]) -> bool:
    """
    True if the sender domain is, or sits under, a configured domain
    (case-insensitive). Matches stop at label boundaries: "lever.co" covers
    "hire.lever.co" but not "clever.com".
    """
    return any(domain_is_or_under(domain, c) for c in candidates if c)


def domain_is_or_under(domain: str | None, owner: str | None) -> bool:
    """Suffix-equality: "mail.corp.com" is under "corp.com", "notcorp.com" is not."""
    d = (domain or "").lower().strip(".")
    o = (owner or "").lower().strip(".")
    if not d or not o:
        return False
    return d == o or d.endswith("." + o)


def keyword_matches(text: str | None, keywords: Sequence[str]) -> bool:
    t = (text or "").lower()
    return any(k and k.lower() in t for k in keywords)


def match_site(
    domain: str | None, text: str | None, signatures: Sequence[SiteSignature]
) -> Optional[SiteSignature]:
    # First match wins, in configured order.
    for sig in signatures:
        if domain_matches(domain, sig.domains) or keyword_matches(text, sig.keywords):
            return sig
    return None
