import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env once, globally
load_dotenv()

# Repository root, so relative dirs don't depend on the caller's cwd.
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def resolve_dir(env_key: str, default: str, *, create: bool = True) -> Path:
    """
    Resolve a directory from the environment.
    Relative values are anchored at PROJECT_ROOT.
    """
    path = Path(os.getenv(env_key) or default).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


SECRETS_DIR = resolve_dir("INBOX_DIGEST_SECRETS_DIR", "secrets")
STATE_DIR = resolve_dir("INBOX_DIGEST_STATE_DIR", ".state")

STATE_PATH = STATE_DIR / "state.json"

# Gmail OAuth client secrets (from Google Cloud Console) and the cached user token.
GMAIL_CREDENTIALS_PATH = SECRETS_DIR / "credentials.json"
GMAIL_TOKEN_PATH = SECRETS_DIR / "gmail_token.json"

# OpenAI key, either as a bare token or {"api_key": "..."}.
OPENAI_TOKEN_TXT = SECRETS_DIR / "openai_token.txt"
OPENAI_TOKEN_JSON = SECRETS_DIR / "openai_token.json"
