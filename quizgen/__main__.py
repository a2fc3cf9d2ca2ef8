"""CLI entry point for quizgen.

Usage:
  python -m quizgen serve [--port PORT] [--host HOST]
  python -m quizgen generate FILE [--flashcards N] [--mcqs N] [--matching N]
                                  [--true-false N] [--fill-in-blanks N]
  python -m quizgen settings
"""
from __future__ import annotations

import asyncio
import json
import mimetypes
import sys
from pathlib import Path

QUANTITY_FLAGS = {
    "--flashcards": "flashcards",
    "--mcqs": "mcqs",
    "--matching": "matching",
    "--true-false": "trueFalse",
    "--fill-in-blanks": "fillInBlanks",
}


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "generate":
        _generate(args[1:])
    elif command == "settings":
        _settings()
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, generate, settings")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str | None) -> str | None:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _serve(args: list[str]):
    import uvicorn

    port = int(_parse_flag(args, "--port", "8765"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    print(f"Starting quizgen on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    uvicorn.run(
        "quizgen.app:app",
        host=host,
        port=port,
        reload=False,
        timeout_graceful_shutdown=5,
    )


def _generate(args: list[str]):
    positional = [a for i, a in enumerate(args)
                  if not a.startswith("--") and (i == 0 or not args[i - 1].startswith("--"))]
    if not positional:
        print("Usage: python -m quizgen generate FILE [--flashcards N] ...")
        sys.exit(1)
    path = Path(positional[0])
    if not path.exists():
        print(f"File not found: {path}")
        sys.exit(1)

    requested = {}
    for flag, key in QUANTITY_FLAGS.items():
        value = _parse_flag(args, flag, None)
        if value is not None:
            requested[key] = int(value)

    from quizgen.app import build_llm, build_processor
    from quizgen.cache import ResponseCache
    from quizgen.config import load_settings

    settings = load_settings()
    text = path.read_text(encoding="utf-8")
    quantities = settings.quantities(requested)
    cache = ResponseCache(expiry=settings.cache_expiry_seconds, max_entries=settings.cache_max_entries)
    processor = build_processor(settings, build_llm(settings), cache)

    print(f"Generating {quantities.to_dict()} from {path.name} using {settings.llm_provider}...",
          file=sys.stderr)
    result = asyncio.run(
        processor.process_document(text, quantities, path.name, _guess_type(path))
    )
    print(json.dumps(result.to_dict(), indent=2))


def _guess_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "text/plain"


def _settings():
    from quizgen.config import CONFIG_PATH, load_settings

    settings = load_settings()
    source = CONFIG_PATH if CONFIG_PATH.exists() else "defaults"
    print(f"Settings ({source})")
    print("=" * 40)
    for key, value in settings.to_dict().items():
        print(f"{key + ':':24s}{value}")


if __name__ == "__main__":
    main()
