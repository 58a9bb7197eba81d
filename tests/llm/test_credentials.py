from __future__ import annotations

import json
from pathlib import Path

import pytest

from inbox_digest.errors import MissingCredentialError
from inbox_digest.llm.credentials import load_openai_api_key, require_openai_api_key


@pytest.fixture(autouse=True)
def no_env_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


def test_env_key_wins(tmp_path: Path, monkeypatch) -> None:
    txt = tmp_path / "openai_token.txt"
    txt.write_text("file-key", encoding="utf-8")
    monkeypatch.setenv("OPENAI_API_KEY", " env-key ")

    assert load_openai_api_key(txt_path=txt, json_path=tmp_path / "none.json") == "env-key"


def test_txt_then_json(tmp_path: Path) -> None:
    txt = tmp_path / "openai_token.txt"
    js = tmp_path / "openai_token.json"
    js.write_text(json.dumps({"openai_api_key": "json-key"}), encoding="utf-8")

    assert load_openai_api_key(txt_path=txt, json_path=js) == "json-key"
    txt.write_text("txt-key\n", encoding="utf-8")
    assert load_openai_api_key(txt_path=txt, json_path=js) == "txt-key"


def test_malformed_json_is_no_key(tmp_path: Path) -> None:
    js = tmp_path / "openai_token.json"
    js.write_text("{broken", encoding="utf-8")
    assert load_openai_api_key(txt_path=tmp_path / "none.txt", json_path=js) is None


def test_missing_key_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(MissingCredentialError):
        require_openai_api_key(txt_path=tmp_path / "a.txt", json_path=tmp_path / "b.json")
