"""Drive document text through chunking, generation, parsing and merging."""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING

from quizgen.cache import ResponseCache, cache_key
from quizgen.chunking import DEFAULT_CHUNK_SIZE, split_into_chunks, split_sentences
from quizgen.errors import AllChunksFailedError, GenerationError, ParseError
from quizgen.merger import merge_results, renumber, valid_items
from quizgen.models import ChunkRequest, QuestionSet, Quantities, fallback_question_set
from quizgen.parser import parse_item_list, parse_question_set
from quizgen.prompts import (
    build_ask_prompt,
    build_more_prompt,
    build_summary_prompt,
    build_transcript_quiz_prompt,
)

if TYPE_CHECKING:
    from quizgen.retry import RetryingGenerator

_log = logging.getLogger("quizgen.pipeline")

# Documents shorter than this are sent as a single chunk
SHORT_INPUT_THRESHOLD = 3000

# Per-category caps on a quiz built from a whole video transcript
TRANSCRIPT_LIMITS = Quantities(flashcards=10, mcqs=10, matching=3, true_false=5, fill_in_blanks=5)

SUMMARY_MAX_TOKENS = 1024
ANSWER_MAX_TOKENS = 800
ANSWER_TEMPERATURE = 0.3


class DocumentProcessor:
    """Turns extracted document text into one bounded ``QuestionSet``."""

    def __init__(
        self,
        generator: RetryingGenerator,
        cache: ResponseCache | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        short_input_threshold: int = SHORT_INPUT_THRESHOLD,
    ):
        self.generator = generator
        self.cache = cache if cache is not None else ResponseCache()
        self.chunk_size = chunk_size
        self.short_input_threshold = short_input_threshold

    def plan(self, text: str, quantities: Quantities) -> tuple[list[str], Quantities]:
        """Return the chunks to submit and the quantities to ask of each."""
        if len(text) < self.short_input_threshold:
            return [text], quantities
        chunks = split_into_chunks(text, self.chunk_size) or [text]
        return chunks, quantities.per_chunk(len(chunks))

    async def process(
        self,
        text: str,
        quantities: Quantities,
        file_name: str,
        file_type: str,
    ) -> QuestionSet:
        """Generate a question set for *text*.

        Chunks run concurrently. A chunk whose generation or parsing fails
        contributes nothing; ``AllChunksFailedError`` is raised only when
        every chunk failed.
        """
        t0 = time.monotonic()
        chunks, chunk_quantities = self.plan(text, quantities)
        _log.info(
            "Processing %s (%s): %d chars in %d chunk(s), per-chunk %s",
            file_name, file_type, len(text), len(chunks), chunk_quantities.to_dict(),
        )

        requests = [ChunkRequest(c, chunk_quantities, file_name, file_type) for c in chunks]
        results = await self._gather([self._process_chunk(r) for r in requests])

        merged = merge_results(results, quantities)
        _log.info("Merged %d chunk result(s) in %.1fs: %s", len(results), time.monotonic() - t0, merged.counts())
        return merged

    async def process_document(
        self,
        text: str,
        quantities: Quantities,
        file_name: str,
        file_type: str,
    ) -> QuestionSet:
        """Like ``process``, but serve the placeholder set when every chunk fails.

        The UI always gets something it can render, so total failure is
        answered with ``fallback_question_set()`` rather than an error.
        """
        try:
            return await self.process(text, quantities, file_name, file_type)
        except AllChunksFailedError as e:
            _log.warning("Serving fallback question set for %s: %s", file_name, e)
            return fallback_question_set()

    async def process_transcript(
        self,
        transcript: str,
        title: str | None,
        limits: Quantities = TRANSCRIPT_LIMITS,
    ) -> QuestionSet:
        """Build a quiz from a whole video transcript.

        The transcript is packed on sentence boundaries only and every chunk
        asks for a free mix of questions; the merged set is capped by
        *limits*. Raises ``AllChunksFailedError`` when no chunk succeeded.
        """
        t0 = time.monotonic()
        chunks = split_sentences(transcript, self.chunk_size) or [transcript]
        _log.info("Processing transcript %r: %d chars in %d chunk(s)", title, len(transcript), len(chunks))

        prompts = [build_transcript_quiz_prompt(c, title) for c in chunks]
        results = await self._gather([self._generate_set(p) for p in prompts])

        merged = merge_results(results, limits)
        _log.info("Merged transcript quiz in %.1fs: %s", time.monotonic() - t0, merged.counts())
        return merged

    async def _gather(self, tasks: list[Awaitable[QuestionSet]]) -> list[QuestionSet]:
        """Run chunk tasks concurrently, keeping submission order.

        Failed chunks come back as empty sets. Errors other than generation
        or parse failures propagate.
        """
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[QuestionSet] = []
        errors: list[BaseException] = []
        for idx, outcome in enumerate(outcomes, 1):
            if isinstance(outcome, (GenerationError, ParseError)):
                _log.warning("Chunk %d/%d failed: %s", idx, len(outcomes), outcome)
                errors.append(outcome)
                results.append(QuestionSet())
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)

        if len(errors) == len(outcomes):
            raise AllChunksFailedError(errors)
        return results

    async def _process_chunk(self, request: ChunkRequest) -> QuestionSet:
        return await self._generate_set(request.prompt())

    async def _generate_set(self, prompt: str) -> QuestionSet:
        key = cache_key(prompt)
        cached = self.cache.get(key)
        if cached is not None:
            _log.info("Cache hit for chunk %s", key[:8])
            return cached

        response = await self.generator.generate(prompt)
        result = parse_question_set(response)
        self.cache.put(key, result)
        return result

    async def generate_more(
        self,
        transcript: str,
        title: str | None,
        category: str,
        quantity: int,
    ) -> list[dict]:
        """Generate *quantity* extra questions of one *category* from a video transcript."""
        prompt = build_more_prompt(transcript, title, category, quantity)
        _log.info("Generating %d more %s for %r", quantity, category, title)
        response = await self.generator.generate(prompt)
        items = valid_items(category, parse_item_list(response, category))
        if category == "fillInBlanks":
            items = renumber(items, prefix="fib")
        elif category in ("matching", "trueFalse"):
            items = renumber(items)
        return items[:quantity]

    async def summarize(self, text: str, content_type: str | None = None, title: str | None = None) -> str:
        prompt = build_summary_prompt(text, content_type, title)
        _log.info("Summarizing %d chars (%s)", len(text), content_type or "text")
        return await self.generator.generate(prompt, max_tokens=SUMMARY_MAX_TOKENS)

    async def answer_question(self, question: str, context: str, title: str | None = None) -> str:
        """Answer *question* from a transcript *context*, at a lower temperature."""
        prompt = build_ask_prompt(question, context, title)
        _log.info("Answering question about %r", title)
        answer = await self.generator.generate(
            prompt, temperature=ANSWER_TEMPERATURE, max_tokens=ANSWER_MAX_TOKENS,
        )
        return answer.strip()
