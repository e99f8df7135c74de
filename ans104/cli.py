"""
ans104 CLI — inspect, verify and create bundle items.

Commands:
  ans104 inspect - Print an item's JSON projection and id
  ans104 verify  - Structural check + signature verification
  ans104 id      - Print an item's id
  ans104 tags    - Print decoded tags
  ans104 create  - Build and sign an item from a data file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _read_item(path: str):
    """Read an item file into a DataItem. Exits on I/O errors."""
    from ans104.item import DataItem

    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    return DataItem(raw)


def _parse_tag(text: str) -> tuple[str, str]:
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"Tag must be name=value, got {text!r}")
    name, value = text.split("=", 1)
    return name, value


def _decode_field(name: str, text: str | None) -> bytes | None:
    from ans104._format.spec import b64url_decode

    if not text:
        return None
    try:
        return b64url_decode(text)
    except ValueError:
        print(f"Error: --{name} must be base64url", file=sys.stderr)
        sys.exit(1)


def cmd_inspect(args: argparse.Namespace) -> None:
    """Print an item's JSON projection and id."""
    from ans104.errors import DataItemError

    item = _read_item(args.path)
    try:
        out = {"id": item.id, "signature_type": item.signature_type, **item.to_json()}
    except DataItemError as e:
        print(f"CORRUPT: {args.path}: {e}", file=sys.stderr)
        sys.exit(2)
    print(json.dumps(out, indent=2))


def cmd_verify(args: argparse.Namespace) -> None:
    """Verify an item. Exit 0 valid, 1 bad signature, 2 corrupt."""
    from ans104._format.validator import validate

    raw = _read_item(args.path).get_raw()
    result = validate(raw)
    if result.ok:
        print(f"OK: {args.path} signature verified")
        return
    if result.is_structural:
        print(f"CORRUPT: {args.path}: {result.reason} ({result.detail})")
        sys.exit(2)
    print(f"FAIL: {args.path} signature does not match owner")
    sys.exit(1)


def cmd_id(args: argparse.Namespace) -> None:
    """Print an item's id."""
    from ans104.errors import DataItemError

    item = _read_item(args.path)
    try:
        print(item.id)
    except DataItemError as e:
        print(f"CORRUPT: {args.path}: {e}", file=sys.stderr)
        sys.exit(2)


def cmd_tags(args: argparse.Namespace) -> None:
    """Print decoded tags, one per line."""
    from ans104.errors import DataItemError

    item = _read_item(args.path)
    try:
        tags = item.tags
    except DataItemError as e:
        print(f"CORRUPT: {args.path}: {e}", file=sys.stderr)
        sys.exit(2)

    if not tags:
        print("No tags.")
        return
    for tag in tags:
        name, value = tag.to_text()
        print(f"  {name}: {value}")


def cmd_create(args: argparse.Namespace, config: dict) -> None:
    """Build and sign an item from a data file."""
    from ans104._format.writer import create_data, write
    from ans104.errors import DataItemError
    from ans104.signers import load_signer

    wallet = args.wallet or config.get("wallet", "")
    if not wallet:
        print("Error: No wallet. Use --wallet or set wallet in config.", file=sys.stderr)
        sys.exit(1)

    try:
        signer = load_signer(wallet)
        data = Path(args.data).read_bytes()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        item = create_data(
            data,
            signer,
            target=_decode_field("target", args.target),
            anchor=_decode_field("anchor", args.anchor),
            tags=args.tag,
        )
        item.sign(signer)
    except DataItemError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        nbytes = write(item, args.output)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Created {args.output} ({nbytes} bytes)")
    print(f"  id: {item.id}")


def main(argv: list[str] | None = None) -> None:
    from ans104 import __version__
    from ans104.config import load_config

    parser = argparse.ArgumentParser(
        prog="ans104",
        description="Parse, validate and sign ANS-104 bundle items.",
    )
    parser.add_argument("--version", action="version", version=f"ans104 {__version__}")
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    p_inspect = sub.add_parser("inspect", help="Print JSON projection and id")
    p_inspect.add_argument("path", help="Path to item file")

    p_verify = sub.add_parser("verify", help="Verify structure and signature")
    p_verify.add_argument("path", help="Path to item file")

    p_id = sub.add_parser("id", help="Print item id")
    p_id.add_argument("path", help="Path to item file")

    p_tags = sub.add_parser("tags", help="Print decoded tags")
    p_tags.add_argument("path", help="Path to item file")

    p_create = sub.add_parser("create", help="Build and sign an item")
    p_create.add_argument("data", help="Path to payload file")
    p_create.add_argument("-o", "--output", required=True, help="Output item path")
    p_create.add_argument("--wallet", help="Path to JWK wallet (RSA or Ed25519)")
    p_create.add_argument(
        "--tag", action="append", type=_parse_tag, default=[],
        help="Tag as name=value (repeatable)",
    )
    p_create.add_argument("--target", help="32-byte target, base64url")
    p_create.add_argument("--anchor", help="32-byte anchor, base64url")

    args = parser.parse_args(argv)
    config = load_config(args.config)

    level = logging.DEBUG if args.verbose else getattr(
        logging, str(config.get("log_level", "WARNING")).upper(), logging.WARNING
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.command == "create":
        cmd_create(args, config)
        return

    commands = {
        "inspect": cmd_inspect,
        "verify": cmd_verify,
        "id": cmd_id,
        "tags": cmd_tags,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
