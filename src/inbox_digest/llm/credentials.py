from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from openai import OpenAI

from inbox_digest.config import paths
from inbox_digest.config.settings import DigestConfig
from inbox_digest.errors import MissingCredentialError


def load_openai_api_key(
    txt_path: Optional[Path] = None, json_path: Optional[Path] = None
) -> str | None:
    env_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    if env_key:
        return env_key

    txt_path = txt_path or paths.OPENAI_TOKEN_TXT
    json_path = json_path or paths.OPENAI_TOKEN_JSON

    if txt_path.exists():
        try:
            token = txt_path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            return None
        return token or None

    if json_path.exists():
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        if not isinstance(payload, dict):
            return None
        # Prefer explicit key names, then generic token key.
        for candidate in (payload.get("api_key"), payload.get("openai_api_key"), payload.get("token")):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return None


def require_openai_api_key(**kwargs) -> str:
    key = load_openai_api_key(**kwargs)
    if not key:
        raise MissingCredentialError(
            "Missing OpenAI API key. Set OPENAI_API_KEY or place openai_token.txt "
            f"in {paths.SECRETS_DIR}."
        )
    return key


def build_openai_client(config: DigestConfig, api_key: Optional[str] = None) -> OpenAI:
    # Timeouts surface as APITimeoutError, which callers treat as a failed call.
    return OpenAI(
        api_key=api_key or require_openai_api_key(),
        timeout=config.request_timeout_s,
        max_retries=config.max_retries,
    )
