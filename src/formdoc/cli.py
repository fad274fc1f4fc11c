from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from .core.config import load_config
from .core.logging import PrivacyFilter, build_formatter, configure_logging, log_event
from .core.validation import (
    ValidationError,
    ValidationIssue,
    as_list,
    as_mapping,
    get_optional,
    get_required,
    require_positive_int,
)
from .pdf import AssetError, ContentEntry, Document, wrap_lines


def configure_logging_from_args(args: argparse.Namespace) -> logging.Logger:
    """Configure logging based on command line arguments."""
    logger = configure_logging(level=getattr(args, "log_level", None))

    log_file = getattr(args, "log_file", None)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(log_path))
        file_handler.name = "formdoc_file"
        file_handler.setFormatter(build_formatter())
        file_handler.addFilter(PrivacyFilter())
        logging.getLogger().addHandler(file_handler)

    return logger


def load_entries(path: Path) -> tuple[str | None, list[ContentEntry]]:
    """Read ``{filename?, entries: [...]}`` from a YAML or JSON file."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValidationError([ValidationIssue(str(path), f"cannot read document: {exc}")]) from exc
    except yaml.YAMLError as exc:
        raise ValidationError([ValidationIssue(str(path), f"invalid YAML: {exc}")]) from exc

    data = as_mapping(raw, path="$")
    items = as_list(get_required(data, "entries", path="$"), path="$.entries")
    entries = [
        ContentEntry.from_mapping(as_mapping(item, path=f"$.entries[{i}]"), path=f"$.entries[{i}]")
        for i, item in enumerate(items)
    ]
    filename = get_optional(data, "filename")
    return (str(filename) if filename else None), entries


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="formdoc", description="Render form data to a single-page PDF")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", default=None, help="Also write JSON logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a document description to PDF")
    render.add_argument("document", type=Path, help="YAML/JSON file with an 'entries' list")
    render.add_argument("--out", type=Path, required=True, help="Output directory")
    render.add_argument("--signature", type=Path, help="Signature image (PNG, JPEG, ...)")
    render.add_argument("--config", type=Path, help="Layout configuration YAML")
    render.add_argument("--filename", help="Override the filename from the document file")
    render.add_argument("--json", action="store_true")

    wrap = sub.add_parser("wrap", help="Print text as it would be wrapped in the PDF")
    wrap.add_argument("text")
    wrap.add_argument("--width", type=int, default=None, help="Characters per line (default: body width)")
    wrap.add_argument("--config", type=Path, help="Layout configuration YAML")

    return parser


def cmd_render(args: argparse.Namespace, logger: logging.Logger) -> int:
    config = load_config(args.config)
    filename, entries = load_entries(args.document)

    doc = Document(config).extend(entries)
    if args.signature:
        doc.attach_signature(args.signature)

    rendered = doc.finalize(args.filename or filename or args.document.stem)
    args.out.mkdir(parents=True, exist_ok=True)
    out_path = args.out / rendered.filename
    rendered.write_to(out_path)

    log_event(
        logger,
        "cli.render",
        document=str(args.document),
        out=str(out_path),
        entries=len(entries),
        signature=doc.signature is not None,
        bytes=rendered.size,
    )

    if args.json:
        payload: dict[str, Any] = {
            "ok": True,
            "path": str(out_path),
            "filename": rendered.filename,
            "bytes": rendered.size,
            "entries": len(entries),
        }
        print(json.dumps(payload))
    else:
        print(str(out_path))
    return 0


def cmd_wrap(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    if args.width is None:
        width = config.layout.max_chars(config.layout.body_font_size)
    else:
        width = require_positive_int(args.width, path="--width")
    for line in wrap_lines(args.text, width):
        print(line)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logger = configure_logging_from_args(args)

    try:
        if args.command == "render":
            return cmd_render(args, logger)
        if args.command == "wrap":
            return cmd_wrap(args)
    except (ValidationError, AssetError) as exc:
        log_event(logger, "cli.error", level=logging.ERROR, command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1

    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
