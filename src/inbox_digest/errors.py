from __future__ import annotations


class DigestError(RuntimeError):
    """Base error for the digest pipeline."""


class ConfigError(DigestError):
    """A configuration value is missing or malformed."""


class MissingCredentialError(DigestError):
    """A required secret (API key, OAuth client file) is absent."""


class FetchError(DigestError):
    """Messages could not be retrieved from the mail store."""
