"""
Command-line interface for the PoliGap validation service.

Usage:
    python -m poligap validate FILE [FILE ...] [--json]
    python -m poligap serve [--host HOST] [--port PORT]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from poligap.config import get_settings
from poligap.middleware.logging import configure_logging
from poligap.models.candidate_file import CandidateFile
from poligap.models.validation import ClassificationVerdict
from poligap.services.file_gate import (
    ALLOWED_MIME_TYPES,
    MAX_FILE_SIZE,
    detect_mime_type,
    mime_type_for_extension,
)
from poligap.services.validation_pipeline import validate_document


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="poligap",
        description="PoliGap CLI - check policy documents before gap analysis"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate one or more documents"
    )
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Files to validate (PDF, Word or text)"
    )
    validate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print one JSON verdict per line instead of a summary"
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the validation API"
    )
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")

    return parser


def load_candidate(path: Path) -> CandidateFile:
    """Build a CandidateFile, sniffing the MIME type from the file header."""
    size = path.stat().st_size
    mime_type = ""
    if size <= MAX_FILE_SIZE:
        with open(path, "rb") as f:
            mime_type = detect_mime_type(f.read(2048))
    # libmagic builds disagree on text and Office types; trust a known extension
    if mime_type not in ALLOWED_MIME_TYPES:
        mime_type = mime_type_for_extension(path.name) or mime_type
    return CandidateFile.from_path(path, mime_type)


def print_verdict(path: Path, verdict: ClassificationVerdict) -> None:
    """Print a human-readable verdict."""
    status = "ACCEPTED" if verdict.is_valid else "REJECTED"
    print(f"{status}: {path}")
    if verdict.reason:
        print(f"  Reason: {verdict.reason}")
    details = verdict.details
    if details is not None:
        print(f"  Content length: {details.content_length}")
        print(f"  Keyword score: {details.keyword_score}")
        print(f"  Keywords: {', '.join(details.found_keywords) or 'none'}")
        if details.confidence is not None:
            print(f"  Confidence: {details.confidence}%")
        if details.suggestion:
            print(f"  Suggestion: {details.suggestion}")


async def validate_command(args: argparse.Namespace) -> int:
    """
    Validate each file in turn.

    Returns:
        int: Exit code (0 when every file is accepted, 1 otherwise)
    """
    verdicts: List[ClassificationVerdict] = []

    for path in args.paths:
        if not path.is_file():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1

        verdict = await validate_document(load_candidate(path))
        verdicts.append(verdict)

        if args.json:
            print(json.dumps({"file": str(path), **verdict.to_response()}))
        else:
            print_verdict(path, verdict)

    return 0 if all(v.is_valid for v in verdicts) else 1


def serve_command(args: argparse.Namespace) -> int:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("poligap.main:app", host=args.host, port=args.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    # Keep validate output readable; the server logs at the configured level
    configure_logging(settings.log_level if args.command == "serve" else "WARNING")

    if args.command == "validate":
        return asyncio.run(validate_command(args))
    elif args.command == "serve":
        return serve_command(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
