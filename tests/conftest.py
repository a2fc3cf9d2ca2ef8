"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from quizgen.models import QuestionSet


def make_flashcard(question: str, answer: str = "An answer") -> dict:
    return {"question": question, "answer": answer}


def make_mcq(question: str, correct: int = 0) -> dict:
    return {"question": question, "options": ["A", "B", "C", "D"], "correctAnswer": correct}


def make_matching(question: str, id: int = 1) -> dict:
    return {
        "id": id,
        "question": question,
        "leftItems": ["H2O", "NaCl", "CO2", "O2"],
        "rightItems": ["water", "salt", "carbon dioxide", "oxygen"],
        "correctMatches": [0, 1, 2, 3],
    }


def make_true_false(question: str, id: int = 1, is_true: bool = True) -> dict:
    return {"id": id, "question": question, "isTrue": is_true}


def make_fill_in_blanks(question: str, id: str = "fib-1") -> dict:
    return {
        "id": id,
        "question": question,
        "textWithBlanks": "Water boils at [BLANK_0] degrees at [BLANK_1] level.",
        "correctAnswers": ["100", "sea"],
        "completeText": "Water boils at 100 degrees at sea level.",
    }


@pytest.fixture
def sample_payload():
    """A well-formed question-set reply in wire shape."""
    return {
        "flashcards": [
            make_flashcard("What is photosynthesis?", "Turning light into chemical energy"),
            make_flashcard("Where does photosynthesis happen?", "In the chloroplasts"),
        ],
        "mcqs": [make_mcq("Which gas do plants absorb?", correct=2)],
        "matchingQuestions": [make_matching("Match the formulas")],
        "trueFalseQuestions": [make_true_false("Plants need sunlight.")],
        "fillInBlanksQuestions": [make_fill_in_blanks("Complete the sentence:")],
    }


@pytest.fixture
def sample_reply(sample_payload):
    return json.dumps(sample_payload)


@pytest.fixture
def sample_set(sample_payload):
    return QuestionSet.from_dict(sample_payload)


@pytest.fixture
def long_document():
    """10,000 characters in ten paragraphs; splits into exactly 3 chunks of 4000."""
    paragraphs = [chr(ord("a") + i) * 997 + "." for i in range(9)]
    paragraphs.append("j" * 999 + ".")
    text = "\n\n".join(paragraphs)
    assert len(text) == 10_000
    return text
