from __future__ import annotations

from typing import List, Optional, Sequence

from inbox_digest.config.settings import DigestConfig
from inbox_digest.models import EnrichedMessage, HeuristicResult, Message
from inbox_digest.rules.BaseRule import BaseRule
from inbox_digest.rules.rules import (
    AcademicReviewRule,
    InterviewRule,
    InternalRule,
    JobSiteRule,
    SchoolRule,
)


def default_rules(config: DigestConfig, owner_domain: Optional[str] = None) -> List[BaseRule]:
    return [
        JobSiteRule(config.site_signatures),
        InterviewRule(),
        AcademicReviewRule(config.academic_venue_domains, config.review_keywords),
        SchoolRule(),
        InternalRule(owner_domain or config.owner_domain),
    ]


class HeuristicClassifier:
    """
    Deterministic first pass over a message.

    All rules run (this is not first-match across rules); every matching rule
    adds its categories. Only the site scan inside JobSiteRule stops at the
    first hit.
    """

    def __init__(
        self,
        config: DigestConfig,
        owner_domain: Optional[str] = None,
        rules: Optional[Sequence[BaseRule]] = None,
    ):
        self.config = config
        self.owner_domain = owner_domain or config.owner_domain
        rules = list(rules) if rules is not None else default_rules(config, self.owner_domain)
        # Higher priority first so the site name comes from the strongest rule.
        self.rules = sorted(rules, key=lambda r: r.priority, reverse=True)

    def classify(self, message: Message) -> HeuristicResult:
        categories = set()
        site_name: Optional[str] = None
        matched: List[str] = []

        for rule in self.rules:
            match = rule.evaluate(message)
            if not match.matched:
                continue
            categories |= match.categories
            if site_name is None and match.site_name:
                site_name = match.site_name
            matched.append(match.reason or rule.name)

        return HeuristicResult(
            categories=frozenset(categories),
            site_name=site_name,
            matched_rules=tuple(matched),
        )

    def enrich(self, messages: Sequence[Message]) -> List[EnrichedMessage]:
        return [EnrichedMessage(message=m, heuristic=self.classify(m)) for m in messages]
