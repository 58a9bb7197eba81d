from __future__ import annotations

import base64
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Dict, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from inbox_digest.errors import MissingCredentialError


# modify: read threads + add labels; send: deliver the digest.
SCOPES = [
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.send",
]


def lookback_query(days: int) -> str:
    # Exclude drafts and own-sent mail from the digest window.
    return f"newer_than:{max(1, int(days))}d -in:drafts -in:sent"


@dataclass(frozen=True)
class GmailClientConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache will be created here after first login.
    token_path: Path
    # Gmail userId, "me" refers to the authenticated user.
    user_id: str = "me"


class GmailClient:
    def __init__(self, cfg: GmailClientConfig):
        self._cfg = cfg
        self._creds: Optional[Credentials] = None
        self._service = None

    def connect(self) -> None:
        """Create an authenticated Gmail API service client."""
        creds = None

        if self._cfg.token_path.exists():
            creds = Credentials.from_authorized_user_file(str(self._cfg.token_path), SCOPES)

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                if not self._cfg.credentials_path.exists():
                    raise MissingCredentialError(
                        f"Missing Gmail OAuth client file at {self._cfg.credentials_path}"
                    )
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(self._cfg.credentials_path),
                    SCOPES,
                )
                creds = flow.run_local_server(port=0)

            # Save the credentials for the next run.
            self._cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
            self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")

        self._creds = creds
        self._service = build("gmail", "v1", credentials=creds, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    def get_profile(self) -> Dict[str, Any]:
        return self.service.users().getProfile(userId=self._cfg.user_id).execute()

    # --- Threads ---

    def search_threads(self, query: str, max_results: int = 500) -> List[str]:
        """Thread IDs matching a Gmail search query, following pagination up to max_results."""
        ids: List[str] = []
        page_token: Optional[str] = None
        while len(ids) < max_results:
            resp = (
                self.service.users()
                .threads()
                .list(
                    userId=self._cfg.user_id,
                    q=query,
                    maxResults=min(100, max_results - len(ids)),
                    pageToken=page_token,
                )
                .execute()
            )
            ids.extend(t["id"] for t in resp.get("threads", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                break
        return ids[:max_results]

    def get_thread(self, thread_id: str, fmt: str = "full") -> Dict[str, Any]:
        return (
            self.service.users()
            .threads()
            .get(userId=self._cfg.user_id, id=thread_id, format=fmt)
            .execute()
        )

    def add_thread_labels(self, thread_id: str, label_ids: List[str]) -> Dict[str, Any]:
        # Gmail ignores label ids already on the thread.
        return (
            self.service.users()
            .threads()
            .modify(userId=self._cfg.user_id, id=thread_id, body={"addLabelIds": list(label_ids)})
            .execute()
        )

    # --- Labels ---

    def list_labels(self) -> List[Dict[str, Any]]:
        resp = self.service.users().labels().list(userId=self._cfg.user_id).execute()
        return list(resp.get("labels", []))

    def create_label(self, name: str, color: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "name": name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
        }
        if color:
            body["color"] = color
        return self.service.users().labels().create(userId=self._cfg.user_id, body=body).execute()

    # --- Sending ---

    def send_message(self, msg: EmailMessage) -> Dict[str, Any]:
        raw = base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii")
        return (
            self.service.users()
            .messages()
            .send(userId=self._cfg.user_id, body={"raw": raw})
            .execute()
        )
