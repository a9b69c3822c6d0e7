# flake8: noqa: E402
# Run via uv so project deps are loaded, e.g.:
# uv run scripts/suretax_probe.py send --request-file data/request.json --debug
# uv run scripts/suretax_probe.py cancel --trans-id 616039832
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from domain.suretax import CancelRequest, TaxRequest
from services.suretax_client import SureTaxClient
from services.suretax_errors import SureTaxError


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Exercise the SureTax endpoints configured in .env.")
    parser.add_argument("--debug", action="store_true", help="Log request and response bodies.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    send = subparsers.add_parser("send", help="Post a tax calculation request.")
    send.add_argument(
        "--request-file",
        type=Path,
        required=True,
        help="JSON file with a request in SureTax field spelling (ClientNumber, ItemList, ...).",
    )

    cancel = subparsers.add_parser("cancel", help="Cancel a previously posted transaction.")
    cancel.add_argument("--trans-id", required=True, help="Transaction id returned by a previous send.")
    cancel.add_argument("--tracking", default="", help="Optional client tracking value.")
    return parser.parse_args(argv)


def load_request(path: Path) -> TaxRequest:
    request = TaxRequest.model_validate_json(path.read_text(encoding="utf-8"))
    settings = config()
    # Credentials left blank in the file come from settings
    updates: dict[str, str] = {}
    if not request.client_number:
        updates["client_number"] = settings.suretax_client_number
    if not request.validation_key:
        updates["validation_key"] = settings.suretax_validation_key
    return request.model_copy(update=updates)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    client = SureTaxClient.from_settings()
    try:
        if args.command == "send":
            result = client.send(load_request(args.request_file))
        else:
            settings = config()
            result = client.cancel(
                CancelRequest(
                    client_number=settings.suretax_client_number,
                    client_tracking=args.tracking,
                    trans_id=args.trans_id,
                    validation_key=settings.suretax_validation_key,
                )
            )
    except SureTaxError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    print(result.model_dump_json(by_alias=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
