from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from inbox_digest.errors import ConfigError


class SiteSignature(BaseModel):
    """One job site: sender domains and body/subject keywords that identify it."""
    model_config = ConfigDict(frozen=True)

    name: str
    domains: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()


def _default_sites() -> Tuple[SiteSignature, ...]:
    from inbox_digest.config.defaults import DEFAULT_SITE_SIGNATURES

    return DEFAULT_SITE_SIGNATURES


def _default_venues() -> Tuple[str, ...]:
    from inbox_digest.config.defaults import DEFAULT_ACADEMIC_VENUE_DOMAINS

    return DEFAULT_ACADEMIC_VENUE_DOMAINS


def _default_review_keywords() -> Tuple[str, ...]:
    from inbox_digest.config.defaults import DEFAULT_REVIEW_KEYWORDS

    return DEFAULT_REVIEW_KEYWORDS


class DigestConfig(BaseSettings):
    """Run configuration. Every field can be set as INBOX_DIGEST_<FIELD> (or in .env)."""

    model_config = SettingsConfigDict(
        env_prefix="INBOX_DIGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    site_signatures: Tuple[SiteSignature, ...] = Field(default_factory=_default_sites)
    academic_venue_domains: Tuple[str, ...] = Field(default_factory=_default_venues)
    review_keywords: Tuple[str, ...] = Field(default_factory=_default_review_keywords)
    # Mailbox owner's domain; resolved from the Gmail profile when unset.
    owner_domain: Optional[str] = None

    label_prefix: str = "LLM"
    lookback_days: int = Field(default=1, ge=1)
    max_threads: int = Field(default=500, ge=1)
    batch_size: int = Field(default=20, ge=1)
    snippet_chars: int = Field(default=2000, ge=1)

    digest_sample_size: int = Field(default=200, ge=1)
    top_sites: int = Field(default=10, ge=1)
    digest_subject_prefix: str = "LLM Email Digest"
    # Defaults to the authenticated mailbox address.
    digest_recipient: Optional[str] = None

    classify_model: str = "gpt-4.1-mini"
    summary_model: str = "gpt-4.1-mini"
    request_timeout_s: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=1, ge=0)

    # Partially answered batches: drop unanswered messages instead of falling back.
    drop_unmatched: bool = False

    @field_validator("owner_domain")
    @classmethod
    def _lower_domain(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip().lower()
        return v or None

    @field_validator("label_prefix")
    @classmethod
    def _strip_prefix(cls, v: str) -> str:
        v = v.strip("/ ")
        if not v:
            raise ValueError("label_prefix must not be empty")
        return v

    @field_validator("digest_recipient")
    @classmethod
    def _blank_recipient(cls, v: Optional[str]) -> Optional[str]:
        return (v or "").strip() or None

    def with_overrides(self, **changes) -> "DigestConfig":
        """Copy with CLI/API overrides applied; None means "keep the current value"."""
        updates = {k: v for k, v in changes.items() if v is not None}
        return _validated(lambda: type(self)(**{**self.model_dump(), **updates}))


def _validated(build) -> DigestConfig:
    try:
        return build()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc


def load_config() -> DigestConfig:
    """Build the run configuration from INBOX_DIGEST_* environment variables and .env."""
    # Importing paths loads .env into the process environment first.
    from inbox_digest.config import paths  # noqa: F401

    return _validated(DigestConfig)
