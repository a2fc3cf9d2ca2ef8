"""Exceptions raised by the question-set pipeline."""
from __future__ import annotations


class QuizGenError(Exception):
    """Base class for pipeline errors."""


class ExtractionError(QuizGenError):
    """Document text could not be obtained."""


class GenerationError(QuizGenError):
    """The upstream LLM call failed on every attempt."""


class ParseError(QuizGenError):
    """The LLM reply did not contain a usable JSON object."""


class AllChunksFailedError(QuizGenError):
    """Every chunk of a document failed to produce questions."""

    def __init__(self, errors: list[BaseException]):
        self.errors = errors
        reasons = "; ".join(f"{type(e).__name__}: {e}" for e in errors)
        super().__init__(f"all {len(errors)} chunk(s) failed: {reasons}")
