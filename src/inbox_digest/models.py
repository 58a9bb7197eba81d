from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from inbox_digest.categories import CategoryTag


@dataclass(frozen=True)
class Message:
    thread_id: str
    message_id: str
    from_header: str
    subject: str
    snippet: str
    sender_domain: str
    to: str = ""
    cc: str = ""
    date: str = ""
    internal_date_ms: int = 0

    @property
    def text(self) -> str:
        """Subject and body snippet, the haystack the heuristics scan."""
        return f"{self.subject}\n{self.snippet}"


@dataclass(frozen=True)
class HeuristicResult:
    # Empty means "no heuristic signal", not Unknown.
    categories: FrozenSet[CategoryTag] = frozenset()
    site_name: Optional[str] = None
    matched_rules: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ModelResult:
    message_id: str
    categories: Tuple[str, ...] = ()
    reasons: Tuple[str, ...] = ()
    is_job_site: bool = False
    is_interview: bool = False
    job_site_name: Optional[str] = None
    is_internal: Optional[bool] = None
    is_external: Optional[bool] = None


@dataclass(frozen=True)
class EnrichedMessage:
    """A message travelling to the model together with its heuristic verdict."""
    message: Message
    heuristic: HeuristicResult


@dataclass(frozen=True)
class ClassifiedMessage:
    message: Message
    categories: FrozenSet[CategoryTag]
    site_name: Optional[str] = None
    reasons: Tuple[str, ...] = ()
    is_internal: Optional[bool] = None
    is_external: Optional[bool] = None
    # Model advisory flags; they never change categories.
    is_job_site: bool = False
    is_interview: bool = False

    @property
    def thread_id(self) -> str:
        return self.message.thread_id

    @property
    def message_id(self) -> str:
        return self.message.message_id


@dataclass(frozen=True)
class ThreadDecision:
    thread_id: str
    categories: FrozenSet[CategoryTag]
    site_names: Tuple[str, ...]
    label_paths: Tuple[str, ...]
    message_ids: Tuple[str, ...] = ()


@dataclass
class ApplyReport:
    threads_labeled: int = 0
    labels_applied: int = 0
    failures: int = 0
    failed_threads: List[str] = field(default_factory=list)
