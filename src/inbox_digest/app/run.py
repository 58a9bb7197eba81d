# src/inbox_digest/app/run.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import date, datetime, timezone
from email.message import EmailMessage
from email.utils import parseaddr
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

import structlog
from googleapiclient.errors import HttpError

from inbox_digest.actions.executor import ActionExecutor
from inbox_digest.config import paths
from inbox_digest.config.settings import DigestConfig
from inbox_digest.digest.aggregate import aggregate, digest_sample
from inbox_digest.digest.render import (
    build_digest_message,
    build_notice_message,
    digest_subject,
    render_html,
)
from inbox_digest.errors import FetchError, MissingCredentialError
from inbox_digest.gmail.client import GmailClientConfig, lookback_query
from inbox_digest.gmail.labels import LabelContext
from inbox_digest.llm.classify import ModelClassifier
from inbox_digest.llm.credentials import build_openai_client, require_openai_api_key
from inbox_digest.llm.summarize import DigestSummarizer
from inbox_digest.models import Message
from inbox_digest.parsing.parser import message_from_gmail
from inbox_digest.pipeline.merge import HEURISTIC_FALLBACK
from inbox_digest.pipeline.orchestrator import BatchClassifier, classify_messages
from inbox_digest.pipeline.policy import label_paths_for, plan_thread_decisions
from inbox_digest.rules.classification import HeuristicClassifier
from inbox_digest.storage.state import load_state, save_state

logger = structlog.get_logger(__name__)


class MailStore(Protocol):
    def get_profile(self) -> Dict[str, Any]: ...
    def search_threads(self, query: str, max_results: int = 500) -> List[str]: ...
    def get_thread(self, thread_id: str, fmt: str = "full") -> Dict[str, Any]: ...
    def list_labels(self) -> List[Dict[str, Any]]: ...
    def create_label(self, name: str, color: Optional[Dict[str, str]] = None) -> Dict[str, Any]: ...
    def add_thread_labels(self, thread_id: str, label_ids: List[str]) -> Dict[str, Any]: ...
    def send_message(self, msg: EmailMessage) -> Dict[str, Any]: ...


class Summarizer(Protocol):
    def summarize(self, stats, sample) -> Optional[str]: ...


@dataclass
class RunSummary:
    status: str
    threads: int = 0
    messages: int = 0
    classified: int = 0
    fallback_messages: int = 0
    threads_labeled: int = 0
    labels_applied: int = 0
    label_failures: int = 0
    summary_available: bool = False
    sent: bool = False
    subject: str = ""


def load_gmail_config() -> GmailClientConfig:
    credentials_path = paths.GMAIL_CREDENTIALS_PATH
    token_path = paths.GMAIL_TOKEN_PATH
    # A cached token is enough; the client file is only needed for a fresh login.
    if not credentials_path.exists() and not token_path.exists():
        raise MissingCredentialError(
            f"Missing Gmail credentials at {credentials_path}. "
            "Did you configure INBOX_DIGEST_SECRETS_DIR?"
        )
    return GmailClientConfig(
        credentials_path=credentials_path,
        token_path=token_path,
        user_id="me",
    )


def _normalized_address(value: str) -> str:
    return parseaddr(value)[1].strip().lower()


def fetch_messages(client: MailStore, config: DigestConfig) -> tuple[int, List[Message]]:
    """Threads in the lookback window, flattened to messages in thread order."""
    query = lookback_query(config.lookback_days)
    try:
        thread_ids = client.search_threads(query, max_results=config.max_threads)
    except (HttpError, OSError) as exc:
        raise FetchError(f"Thread search failed: {exc}") from exc

    messages: List[Message] = []
    for tid in thread_ids:
        try:
            thread = client.get_thread(tid)
        except HttpError as exc:
            # Thread deleted/moved between search and fetch.
            logger.warning("thread_fetch_failed", thread_id=tid, error=str(exc))
            continue
        for raw in thread.get("messages", []) or []:
            if "DRAFT" in {str(x).upper() for x in raw.get("labelIds") or []}:
                continue
            messages.append(message_from_gmail(raw, snippet_chars=config.snippet_chars))
    return len(thread_ids), messages


def build_ai_stack(config: DigestConfig) -> tuple[ModelClassifier, DigestSummarizer]:
    # Fails before any network call when no key is configured.
    openai_client = build_openai_client(config, require_openai_api_key())
    return (
        ModelClassifier(openai_client, config.classify_model),
        DigestSummarizer(openai_client, config.summary_model),
    )


def run_digest(
    *,
    config: DigestConfig,
    client: MailStore,
    classifier: Optional[BatchClassifier] = None,
    summarizer: Optional[Summarizer] = None,
    today: Optional[date] = None,
    dry_run: bool = False,
    state_path: Optional[Path] = None,
    progress_cb: Optional[Callable[[str, Dict[str, Any]], None]] = None,
) -> Dict[str, Any]:
    """
    Execute one digest run and return a machine-readable summary.

    Every run ends in exactly one outbound message: the digest (possibly
    statistics-only) or a "no new emails" notice. Labels are applied before
    the digest is summarized, so a summarizer failure never blocks labeling.
    """
    def report(step: str, *, detail: str | None = None, **extra: Any) -> None:
        if not progress_cb:
            return
        payload: Dict[str, Any] = {"detail": detail}
        payload.update(extra)
        progress_cb(step, payload)

    today = today or date.today()

    if classifier is None or summarizer is None:
        report("credentials", detail="Loading OpenAI credentials")
        default_classifier, default_summarizer = build_ai_stack(config)
        classifier = classifier or default_classifier
        summarizer = summarizer or default_summarizer

    summary = RunSummary(status="digest")

    owner_email = ""
    report("profile", detail="Reading mailbox profile")
    try:
        owner_email = _normalized_address(client.get_profile().get("emailAddress", ""))
        owner_domain = config.owner_domain or (owner_email.rsplit("@", 1)[1] if "@" in owner_email else None)
        recipient = config.digest_recipient or owner_email

        report("fetch_messages", detail=f"Fetching threads from the last {config.lookback_days} day(s)")
        summary.threads, messages = fetch_messages(client, config)
    except (FetchError, HttpError, OSError) as exc:
        # Without a profile, "me" still addresses the authenticated mailbox.
        logger.error("fetch_failed", error=str(exc))
        summary.status = "fetch_failed"
        summary.subject = f"{digest_subject(config.digest_subject_prefix, today)} (no activity)"
        notice = build_notice_message(
            sender=owner_email,
            recipient=config.digest_recipient or owner_email or "me",
            subject=summary.subject,
            text=f"No activity: messages could not be fetched ({exc}).",
        )
        summary.sent = _send(client, notice, dry_run)
        _persist(state_path, today, {}, summary)
        report("done", detail="Fetch failed, notice sent", metrics=asdict(summary))
        return asdict(summary)

    summary.messages = len(messages)
    logger.info("fetched", threads=summary.threads, messages=summary.messages)

    if not messages:
        summary.status = "no_activity"
        summary.subject = f"{digest_subject(config.digest_subject_prefix, today)} (no new emails)"
        notice = build_notice_message(
            sender=owner_email,
            recipient=recipient,
            subject=summary.subject,
            text=f"No new emails in the last {config.lookback_days} day(s).",
        )
        summary.sent = _send(client, notice, dry_run)
        _persist(state_path, today, {}, summary)
        report("done", detail="No new emails", metrics=asdict(summary))
        return asdict(summary)

    # --- Classify ---
    report("classify", detail=f"Classifying {summary.messages} messages")
    heuristics = HeuristicClassifier(config, owner_domain=owner_domain)
    classified = classify_messages(
        messages,
        heuristics,
        classifier,
        batch_size=config.batch_size,
        drop_unmatched=config.drop_unmatched,
    )
    summary.classified = len(classified)
    summary.fallback_messages = sum(1 for c in classified if HEURISTIC_FALLBACK in c.reasons)

    # --- Labels ---
    report("labels", detail="Applying labels")
    static_paths = label_paths_for(config.label_prefix)
    decisions = plan_thread_decisions(classified, static_paths)
    labels = LabelContext(client, config.label_prefix)
    if not dry_run:
        # Category labels once up front; site labels are created per thread.
        used = {p for d in decisions for p in d.label_paths}
        try:
            labels.provision([p for p in static_paths.values() if p in used])
        except (HttpError, OSError) as exc:
            logger.warning("label_provision_failed", error=str(exc))
    applied = ActionExecutor(client=client, labels=labels, dry_run=dry_run).apply(decisions)
    summary.threads_labeled = applied.threads_labeled
    summary.labels_applied = applied.labels_applied
    summary.label_failures = applied.failures

    # --- Digest ---
    report("digest", detail="Building digest")
    stats = aggregate(classified, top_n=config.top_sites)
    prose = summarizer.summarize(stats, digest_sample(classified, config.digest_sample_size))
    summary.summary_available = prose is not None

    summary.subject = digest_subject(config.digest_subject_prefix, today)
    html_body = render_html(stats, prose, today, config.digest_subject_prefix)
    msg = build_digest_message(
        sender=owner_email,
        recipient=recipient,
        subject=summary.subject,
        html_body=html_body,
    )
    summary.sent = _send(client, msg, dry_run)

    _persist(state_path, today, stats.as_dict()["counts"], summary)
    report("done", detail="Run completed", metrics=asdict(summary))
    logger.info("run_completed", **asdict(summary))
    return asdict(summary)


def _send(client: MailStore, msg: EmailMessage, dry_run: bool) -> bool:
    if dry_run:
        logger.info("dry_run_send", subject=msg["Subject"], to=msg["To"])
        return False
    client.send_message(msg)
    logger.info("message_sent", subject=msg["Subject"], to=msg["To"])
    return True


def _persist(state_path: Optional[Path], today: date, counts: Dict[str, int], summary: RunSummary) -> None:
    if state_path is None:
        return
    st = load_state(state_path)
    st.runs += 1
    st.last_run_at = datetime.now(timezone.utc).isoformat()
    if summary.sent:
        st.last_digest_date = today.isoformat()
    st.last_counts = dict(counts)
    save_state(state_path, st)
