"""Split extracted document text into bounded chunks for parallel generation."""
from __future__ import annotations

import re

DEFAULT_CHUNK_SIZE = 4000

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def split_into_chunks(text: str, max_chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split *text* into chunks of at most *max_chunk_size* characters.

    Paragraphs (separated by blank lines) are packed greedily. A paragraph
    that is longer than the bound on its own is broken on sentence endings
    and its sentences are packed the same way. A single sentence longer than
    the bound becomes its own oversized chunk; content is never truncated.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive (got {max_chunk_size})")

    chunks: list[str] = []
    current = ""

    def flush() -> None:
        nonlocal current
        if current.strip():
            chunks.append(current.strip())
        current = ""

    for paragraph in _PARAGRAPH_BREAK.split(text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue

        if len(paragraph) > max_chunk_size:
            flush()
            for sentence in _SENTENCE_BREAK.split(paragraph):
                if not sentence:
                    continue
                candidate = f"{current} {sentence}" if current else sentence
                if len(candidate) <= max_chunk_size:
                    current = candidate
                else:
                    flush()
                    current = sentence
            continue

        candidate = f"{current}\n\n{paragraph}" if current else paragraph
        if len(candidate) <= max_chunk_size:
            current = candidate
        else:
            flush()
            current = paragraph

    flush()
    return chunks


def split_sentences(text: str, max_chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Pack the sentences of *text* greedily into chunks, ignoring paragraphs.

    Meant for transcripts, which carry no reliable paragraph breaks. A
    sentence longer than the bound becomes its own oversized chunk.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive (got {max_chunk_size})")

    chunks: list[str] = []
    current = ""
    for sentence in _SENTENCE_BREAK.split(text.strip()):
        if not sentence:
            continue
        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) <= max_chunk_size:
            current = candidate
        else:
            if current:
                chunks.append(current)
            current = sentence
    if current:
        chunks.append(current)
    return chunks
