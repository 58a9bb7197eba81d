from __future__ import annotations

import argparse
import json
import sys

from inbox_digest.app.run import load_gmail_config, run_digest
from inbox_digest.config.paths import STATE_PATH
from inbox_digest.config.settings import load_config
from inbox_digest.errors import DigestError
from inbox_digest.gmail.client import GmailClient
from inbox_digest.logging_setup import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify recent mail, label threads, and send the daily digest.")
    parser.add_argument("--days", type=int, default=None, help="Lookback window in days (default from env / 1).")
    parser.add_argument("--batch-size", type=int, default=None, help="Messages per classification call.")
    parser.add_argument("--label-prefix", default=None, help="Root label, e.g. LLM.")
    parser.add_argument("--dry-run", action="store_true", help="Classify only; no labels, no mail sent.")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-format", choices=["console", "json"], default="console")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    try:
        config = load_config().with_overrides(
            lookback_days=args.days,
            batch_size=args.batch_size,
            label_prefix=args.label_prefix,
        )
        client = GmailClient(load_gmail_config())
        client.connect()
        summary = run_digest(
            config=config,
            client=client,
            dry_run=args.dry_run,
            state_path=STATE_PATH,
            progress_cb=lambda step, event: print(f"[{step}] {event.get('detail') or ''}", file=sys.stderr),
        )
    except DigestError as exc:
        print(f"[ERROR] {type(exc).__name__}: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
