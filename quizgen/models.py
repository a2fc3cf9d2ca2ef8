from __future__ import annotations

import math
from dataclasses import dataclass, field

# Wire key of each category's list inside a question set
CATEGORY_KEYS = {
    "flashcards": "flashcards",
    "mcqs": "mcqs",
    "matching": "matchingQuestions",
    "trueFalse": "trueFalseQuestions",
    "fillInBlanks": "fillInBlanksQuestions",
}

DEFAULT_QUANTITIES = {
    "flashcards": 5,
    "mcqs": 5,
    "matching": 2,
    "trueFalse": 5,
    "fillInBlanks": 5,
}


@dataclass(frozen=True)
class Quantities:
    flashcards: int = 0
    mcqs: int = 0
    matching: int = 0
    true_false: int = 0
    fill_in_blanks: int = 0

    @classmethod
    def from_request(cls, raw: dict | None, defaults: dict | None = None) -> Quantities:
        """Build document-level quantities, filling missing or zero counts from *defaults*."""
        if not isinstance(raw, dict):
            raw = {}
        defaults = defaults or DEFAULT_QUANTITIES

        def pick(key: str) -> int:
            value = raw.get(key)
            try:
                value = int(value) if value else 0
            except (TypeError, ValueError):
                value = 0
            return value if value > 0 else int(defaults.get(key, 0))

        return cls(
            flashcards=pick("flashcards"),
            mcqs=pick("mcqs"),
            matching=pick("matching"),
            true_false=pick("trueFalse"),
            fill_in_blanks=pick("fillInBlanks"),
        )

    def per_chunk(self, chunk_count: int) -> Quantities:
        """Chunk-level quantities for a document split into *chunk_count* chunks.

        Every category is ceiling-divided so the chunks together ask for at
        least the requested total. Matching uses ``max(1, total // n)``
        instead, so each chunk contributes at least one matching question.
        """
        if chunk_count <= 1:
            return self
        return Quantities(
            flashcards=math.ceil(self.flashcards / chunk_count),
            mcqs=math.ceil(self.mcqs / chunk_count),
            matching=max(1, self.matching // chunk_count),
            true_false=math.ceil(self.true_false / chunk_count),
            fill_in_blanks=math.ceil(self.fill_in_blanks / chunk_count),
        )

    def for_category(self, category: str) -> int:
        return self.to_dict()[category]

    def to_dict(self) -> dict:
        return {
            "flashcards": self.flashcards,
            "mcqs": self.mcqs,
            "matching": self.matching,
            "trueFalse": self.true_false,
            "fillInBlanks": self.fill_in_blanks,
        }


@dataclass
class QuestionSet:
    flashcards: list[dict] = field(default_factory=list)
    mcqs: list[dict] = field(default_factory=list)
    matching: list[dict] = field(default_factory=list)
    true_false: list[dict] = field(default_factory=list)
    fill_in_blanks: list[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> QuestionSet:
        """Build from the wire shape. Missing or non-list categories become empty."""
        def items(key: str) -> list[dict]:
            value = data.get(key)
            if not isinstance(value, list):
                return []
            return [v for v in value if isinstance(v, dict)]

        return cls(
            flashcards=items("flashcards"),
            mcqs=items("mcqs"),
            matching=items("matchingQuestions"),
            true_false=items("trueFalseQuestions"),
            fill_in_blanks=items("fillInBlanksQuestions"),
        )

    def category(self, name: str) -> list[dict]:
        return {
            "flashcards": self.flashcards,
            "mcqs": self.mcqs,
            "matching": self.matching,
            "trueFalse": self.true_false,
            "fillInBlanks": self.fill_in_blanks,
        }[name]

    def counts(self) -> dict[str, int]:
        return {name: len(self.category(name)) for name in CATEGORY_KEYS}

    def is_empty(self) -> bool:
        return not any(self.counts().values())

    def to_dict(self) -> dict:
        return {
            "flashcards": [dict(i) for i in self.flashcards],
            "mcqs": [dict(i) for i in self.mcqs],
            "matchingQuestions": [dict(i) for i in self.matching],
            "trueFalseQuestions": [dict(i) for i in self.true_false],
            "fillInBlanksQuestions": [dict(i) for i in self.fill_in_blanks],
        }


@dataclass(frozen=True)
class ChunkRequest:
    text: str
    quantities: Quantities
    file_name: str
    file_type: str

    def prompt(self) -> str:
        from quizgen.prompts import build_prompt

        return build_prompt(self.text, self.quantities, self.file_name, self.file_type)


@dataclass
class CacheEntry:
    timestamp: float
    data: QuestionSet


# ── Field contracts ─────────────────────────────────────────────────


def _is_str(value) -> bool:
    return isinstance(value, str)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _valid_flashcard(item: dict) -> bool:
    return _is_str(item.get("answer"))


def _valid_mcq(item: dict) -> bool:
    options = item.get("options")
    answer = item.get("correctAnswer")
    return (
        _is_str_list(options)
        and len(options) == 4
        and _is_int(answer)
        and 0 <= answer < len(options)
    )


def _valid_matching(item: dict) -> bool:
    left = item.get("leftItems")
    right = item.get("rightItems")
    matches = item.get("correctMatches")
    if not (_is_str_list(left) and _is_str_list(right) and isinstance(matches, list)):
        return False
    if len(matches) != len(left):
        return False
    return all(_is_int(m) and 0 <= m < len(right) for m in matches)


def _valid_true_false(item: dict) -> bool:
    return isinstance(item.get("isTrue"), bool)


def _valid_fill_in_blanks(item: dict) -> bool:
    return (
        _is_str(item.get("textWithBlanks"))
        and _is_str_list(item.get("correctAnswers"))
        and _is_str(item.get("completeText"))
    )


_VALIDATORS = {
    "flashcards": _valid_flashcard,
    "mcqs": _valid_mcq,
    "matching": _valid_matching,
    "trueFalse": _valid_true_false,
    "fillInBlanks": _valid_fill_in_blanks,
}


def is_valid_item(category: str, item) -> bool:
    """Return True if *item* carries every required field of *category*."""
    if not isinstance(item, dict):
        return False
    question = item.get("question")
    if not isinstance(question, str) or not question.strip():
        return False
    return _VALIDATORS[category](item)


def fallback_question_set() -> QuestionSet:
    """Placeholder set served when no chunk of a document produced questions."""
    return QuestionSet(
        flashcards=[
            {"question": "What does this document cover?", "answer": "Content from the uploaded file"},
        ],
        mcqs=[
            {
                "question": "What is contained in this document?",
                "options": ["File content", "Random data", "Empty data", "Unknown"],
                "correctAnswer": 0,
            },
        ],
        matching=[
            {
                "id": 1,
                "question": "Match items from the document:",
                "leftItems": ["Item 1", "Item 2", "Item 3", "Item 4"],
                "rightItems": ["Description 1", "Description 2", "Description 3", "Description 4"],
                "correctMatches": [0, 1, 2, 3],
            },
        ],
        true_false=[
            {"id": 1, "question": "This is content from the uploaded file.", "isTrue": True},
        ],
        fill_in_blanks=[
            {
                "id": "fib-1",
                "question": "Complete the sentence about the document:",
                "textWithBlanks": "This document contains [BLANK_0] from the uploaded [BLANK_1].",
                "correctAnswers": ["content", "file"],
                "completeText": "This document contains content from the uploaded file.",
                "explanation": "This is a simple fill-in-the-blanks question about the document.",
                "difficulty": "easy",
            },
        ],
    )
