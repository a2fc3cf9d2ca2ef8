"""Extract question sets from free-form LLM replies."""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator

from quizgen.errors import ParseError
from quizgen.models import CATEGORY_KEYS, QuestionSet

_log = logging.getLogger("quizgen.parser")

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)


def parse_question_set(raw: str) -> QuestionSet:
    """Parse an LLM reply into a ``QuestionSet``.

    A reply that decodes as a whole to an object is taken as is, even with
    no category keys. Otherwise ``<think>`` blocks are dropped and the reply
    is scanned for balanced top-level ``{…}`` spans, decoded in order of
    appearance. There the first object carrying at least one category key
    wins, so an inner item of a truncated reply is not mistaken for a set.
    Missing categories come back empty. Items are not validated here.

    Raises ``ParseError`` if no such object can be recovered.
    """
    data = _decode_whole(raw)
    if isinstance(data, dict):
        return QuestionSet.from_dict(data)

    wire_keys = set(CATEGORY_KEYS.values())
    for data in _decode_spans(raw, "{", "}"):
        if isinstance(data, dict) and wire_keys & data.keys():
            return QuestionSet.from_dict(data)
    _log.debug("No question-set object in response: %.300s", raw)
    raise ParseError("No valid JSON question set found in response")


def parse_item_list(raw: str, category: str) -> list[dict]:
    """Parse a reply holding a list of questions of a single *category*.

    Accepts a bare JSON array, an object holding the category's list (under
    its wire key, its short name or ``questions``), an object whose values
    are the items, or any of these embedded in prose. An embedded array only
    counts if it holds at least one object, so an item's ``options`` list is
    never taken for the reply.
    """
    keys = (CATEGORY_KEYS[category], category, "questions")

    data = _decode_whole(raw)
    if isinstance(data, list):
        return _dicts(data)
    if isinstance(data, dict):
        items = _items_from_object(data, keys)
        if items is not None:
            return items

    for data in _decode_spans(raw, "[", "]"):
        if isinstance(data, list) and _dicts(data):
            return _dicts(data)

    for data in _decode_spans(raw, "{", "}"):
        if isinstance(data, dict):
            items = _items_from_object(data, keys)
            if items is not None:
                return items

    _log.debug("No %s list in response: %.300s", category, raw)
    raise ParseError(f"No valid JSON {category} list found in response")


def _dicts(values: list) -> list[dict]:
    return [v for v in values if isinstance(v, dict)]


def _items_from_object(data: dict, keys: tuple[str, ...]) -> list[dict] | None:
    for key in keys:
        if isinstance(data.get(key), list):
            return _dicts(data[key])
    values = _dicts(list(data.values()))
    return values or None


def _decode_whole(raw: str):
    try:
        return json.loads(raw.strip())
    except json.JSONDecodeError:
        return None


def _decode_spans(raw: str, open_ch: str, close_ch: str) -> Iterator:
    """Yield each balanced span of *raw* that decodes, ``<think>`` blocks removed."""
    text = _THINK_BLOCK.sub("", raw.strip())
    for span in find_balanced_spans(text, open_ch, close_ch):
        try:
            yield json.loads(span)
        except json.JSONDecodeError:
            continue


def find_balanced_spans(text: str, open_ch: str = "{", close_ch: str = "}") -> list[str]:
    """Find balanced top-level ``open_ch … close_ch`` substrings in *text*.

    Brackets inside JSON string literals (honouring backslash escapes) do
    not count toward nesting. An opening bracket that is never closed is
    skipped and the scan resumes after it.
    """
    results: list[str] = []
    i = 0
    while i < len(text):
        if text[i] != open_ch:
            i += 1
            continue
        depth = 0
        in_str = False
        escape = False
        for j in range(i, len(text)):
            ch = text[j]
            if escape:
                escape = False
                continue
            if ch == "\\":
                escape = True
                continue
            if ch == '"':
                in_str = not in_str
                continue
            if in_str:
                continue
            if ch == open_ch:
                depth += 1
            elif ch == close_ch:
                depth -= 1
                if depth == 0:
                    results.append(text[i : j + 1])
                    i = j + 1
                    break
        else:
            # Unbalanced, skip this opening bracket
            i += 1
    return results
