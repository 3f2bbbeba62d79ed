#!/usr/bin/env python3
"""
coc-keygen: acquire Clash of Clans API keys for a host IP.

Logs in to the developer portal, revokes this tool's keys that are bound
to other IPs, and creates keys for the given IP until the requested count
(at most 10 per account) is reached.

Run:
  COC_EMAIL=... COC_PASSWORD=... key-gen --ip 1.2.3.4 --count 2

Package entry point:
  python -m coc_keygen --ip 1.2.3.4
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

import httpx
from dotenv import load_dotenv

from coc_keygen.backends import HttpBackend
from coc_keygen.config import settings_from_env
from coc_keygen.errors import KeyGenError
from coc_keygen.handler import KeyReconciler, validate_ip
from coc_keygen.models import Credentials

logger = logging.getLogger("coc_keygen")


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def write_keys(keys: list[str], ip: str, name: str, output_dir: Path, fmt: str = "txt") -> Path:
    """Write the keys to ``{output_dir}/{ip}.{fmt}`` and return the path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{ip}.{fmt}"
    if fmt == "json":
        content = json.dumps({"ip": ip, "name": name, "keys": keys}, indent=2)
    else:
        content = ",".join(keys)
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="key-gen", description="Acquire Clash of Clans API keys for a host IP")
    parser.add_argument("--ip", required=True, help="IP address of the Host")
    parser.add_argument("--count", type=int, default=1, help="Total key count (default: 1, max: 10)")
    parser.add_argument("--name", default=None, help="Key name (default: COC_KEY_NAME or clashofclans.js.keys)")
    parser.add_argument("--email", default=None, help="Portal account email (default: COC_EMAIL)")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Directory for the key file")
    parser.add_argument("--format", choices=["txt", "json"], default="txt", help="Key file format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def run(args: argparse.Namespace) -> list[str]:
    validate_ip(args.ip)
    settings = settings_from_env()
    credentials = Credentials(email=args.email or settings.email, password=settings.password)
    name = args.name or settings.key_name

    backend = HttpBackend(settings)
    logger.info("Requesting %d key(s) named %s for %s from %s", args.count, name, args.ip, backend.display_info)
    reconciler = KeyReconciler(args.ip, backend=backend)
    keys = await reconciler.initialize(credentials, key_name=name, key_count=args.count)

    path = write_keys(keys, args.ip, name, args.output_dir, args.format)
    logger.info("Wrote %d key(s) to %s", len(keys), path)
    return keys


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        keys = asyncio.run(run(args))
    except (KeyGenError, httpx.HTTPError) as e:
        logger.error("%s", e)
        return 1

    print(f"Keys retrieved {len(keys)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
