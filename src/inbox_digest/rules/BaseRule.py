from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Sequence

from inbox_digest.categories import CategoryTag
from inbox_digest.models import Message
from inbox_digest.rules.matcher import keyword_matches


@dataclass(frozen=True)
class RuleMatch:
    """What a single rule contributes to a message's heuristic verdict."""
    categories: FrozenSet[CategoryTag] = field(default_factory=frozenset)
    site_name: Optional[str] = None
    reason: str = ""

    @property
    def matched(self) -> bool:
        return bool(self.categories)


NO_MATCH = RuleMatch()


class BaseRule(ABC):
    """
    Base class for heuristic rules.

    Rules are deterministic and side-effect free. Each one inspects a Message
    and returns a RuleMatch; an empty RuleMatch means "no opinion".
    """

    # Human-/debug-friendly unique name
    name: str = "base_rule"

    # Higher runs earlier
    priority: int = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, priority={self.priority})"

    # --- Helpers (None-safe, case-insensitive) ---

    def contains_any(self, text: str | None, needles: Sequence[str]) -> bool:
        return keyword_matches(text, needles)

    def regex(self, text: str | None, pattern: "str | re.Pattern[str]") -> bool:
        if isinstance(pattern, re.Pattern):
            return bool(pattern.search(text or ""))
        return bool(re.search(pattern, text or "", flags=re.IGNORECASE))

    def hit(self, *tags: CategoryTag, site_name: Optional[str] = None, reason: str = "") -> RuleMatch:
        return RuleMatch(categories=frozenset(tags), site_name=site_name, reason=reason or self.name)

    # --- Rule API ---

    @abstractmethod
    def evaluate(self, message: Message) -> RuleMatch:
        raise NotImplementedError
