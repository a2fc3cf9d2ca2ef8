"""Merge per-chunk question sets into one bounded question set."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from quizgen.models import QuestionSet, Quantities, is_valid_item

_log = logging.getLogger("quizgen.merger")


def valid_items(category: str, items: Iterable) -> list[dict]:
    """Keep the items that satisfy *category*'s field contract, in order."""
    return [dict(item) for item in items if is_valid_item(category, item)]


def dedupe_by_question(items: Iterable[dict]) -> list[dict]:
    """Drop items whose question text was already seen. First occurrence wins."""
    seen: dict[str, dict] = {}
    for item in items:
        seen.setdefault(item["question"], item)
    return list(seen.values())


def renumber(items: Sequence[dict], prefix: str | None = None) -> list[dict]:
    """Reassign ids 1..n by position, as ``"<prefix>-n"`` strings when *prefix* is given."""
    return [
        {**item, "id": f"{prefix}-{i}" if prefix else i}
        for i, item in enumerate(items, 1)
    ]


def merge_results(results: Sequence[QuestionSet], limits: Quantities) -> QuestionSet:
    """Merge chunk results in submission order and truncate to *limits*.

    Flashcards and MCQs are deduplicated by question text. Matching,
    true/false and fill-in-blanks items get fresh positional ids over the
    merged list before truncation, since chunk-local ids collide.
    """
    merged = QuestionSet()
    for name in ("flashcards", "mcqs", "matching", "trueFalse", "fillInBlanks"):
        combined: list = []
        for result in results:
            combined.extend(result.category(name))
        items = valid_items(name, combined)
        dropped = len(combined) - len(items)
        if dropped:
            _log.info("Dropped %d malformed %s item(s)", dropped, name)

        if name in ("flashcards", "mcqs"):
            items = dedupe_by_question(items)
        elif name == "fillInBlanks":
            items = renumber(items, prefix="fib")
        else:
            items = renumber(items)

        merged.category(name).extend(items[: limits.for_category(name)])
    return merged
