"""FastAPI application exposing the question-set pipeline."""
from __future__ import annotations

import json
import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from quizgen.cache import ResponseCache
from quizgen.config import Settings, load_settings, save_settings
from quizgen.errors import AllChunksFailedError, ExtractionError, GenerationError, ParseError
from quizgen.models import CATEGORY_KEYS
from quizgen.pipeline import DocumentProcessor
from quizgen.retry import RetryingGenerator

app = FastAPI(title="Quiz Generator")

_log = logging.getLogger("quizgen.app")

SUMMARY_UNAVAILABLE = "Unable to generate summary. Please try again later."

# Global state (initialized in startup)
_settings: Settings | None = None
_cache: ResponseCache | None = None


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def get_cache() -> ResponseCache:
    assert _cache is not None
    return _cache


def build_llm(s: Settings):
    if s.llm_provider == "gemini":
        from quizgen.providers.llm_gemini import GeminiProvider
        return GeminiProvider(
            model=s.llm_model,
            base_url=s.gemini_url,
            safety_threshold=s.safety_threshold,
            top_p=s.top_p,
            top_k=s.top_k,
            timeout=s.request_timeout,
        )
    elif s.llm_provider == "ollama":
        from quizgen.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=s.ollama_url, model=s.llm_model, timeout=s.request_timeout)
    elif s.llm_provider == "anthropic":
        from quizgen.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=s.llm_model)
    elif s.llm_provider == "openai":
        from quizgen.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=s.llm_model)
    raise ValueError(f"Unknown LLM provider: {s.llm_provider}")


def _get_llm():
    return build_llm(get_settings())


def build_processor(s: Settings, llm, cache: ResponseCache) -> DocumentProcessor:
    generator = RetryingGenerator(
        llm,
        policy=s.retry_policy(),
        temperature=s.temperature,
        max_tokens=s.max_output_tokens,
    )
    return DocumentProcessor(
        generator,
        cache=cache,
        chunk_size=s.chunk_size,
        short_input_threshold=s.short_input_threshold,
    )


def get_processor() -> DocumentProcessor:
    return build_processor(get_settings(), _get_llm(), get_cache())


def _extract_text(file_content, file_name: str, file_type: str) -> str:
    """Return the document text supplied by the client.

    Binary formats are converted to text before they reach this service;
    only the already-extracted text is accepted here.
    """
    if not isinstance(file_content, str):
        raise ExtractionError(f"Expected extracted text for {file_name}, got {type(file_content).__name__}")
    if not file_content.strip():
        raise ExtractionError(f"No text content could be extracted from {file_name} ({file_type})")
    return file_content


@app.on_event("startup")
async def startup():
    global _settings, _cache
    if _settings is None:
        _settings = load_settings()
    if _cache is None:
        s = get_settings()
        _cache = ResponseCache(expiry=s.cache_expiry_seconds, max_entries=s.cache_max_entries)
    _log.info("Started with %s provider (%s)", _settings.llm_provider, _settings.llm_model)


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise HTTPException(400, "Invalid request body format")
    if not isinstance(body, dict):
        raise HTTPException(400, "Invalid request body format")
    return body


@app.get("/api/health")
async def api_health():
    return {"status": "ok", "provider": get_settings().llm_provider}


@app.post("/api/generate-questions")
async def api_generate_questions(request: Request):
    body = await _json_body(request)
    file_content = body.get("fileContent")
    file_name = body.get("fileName")
    file_type = body.get("fileType") or "text/plain"

    if not file_content:
        raise HTTPException(400, "File content is required")
    if not file_name:
        raise HTTPException(400, "File name is required")

    try:
        text = _extract_text(file_content, file_name, file_type)
    except ExtractionError as e:
        _log.warning("Extraction failed for %s: %s", file_name, e)
        raise HTTPException(400, f"Failed to extract content from {file_name}. Error: {e}")

    quantities = get_settings().quantities(body.get("quantities"))
    _log.info("Processing file: %s, type: %s", file_name, file_type)
    result = await get_processor().process_document(text, quantities, file_name, file_type)
    return JSONResponse(
        result.to_dict(),
        headers={"Cache-Control": "max-age=3600, must-revalidate"},
    )


@app.post("/api/generate-more-questions")
async def api_generate_more_questions(request: Request):
    body = await _json_body(request)
    transcript = body.get("transcript")
    category = body.get("type")
    if not transcript:
        raise HTTPException(400, "Transcript is required")
    if not category:
        raise HTTPException(400, "Question type is required")
    if category not in CATEGORY_KEYS:
        raise HTTPException(400, "Invalid question type")

    try:
        quantity = int(body.get("quantity") or 5)
    except (TypeError, ValueError):
        raise HTTPException(400, "Quantity must be an integer")
    if quantity < 1:
        raise HTTPException(400, "Quantity must be positive")

    try:
        questions = await get_processor().generate_more(
            transcript, body.get("videoTitle"), category, quantity,
        )
    except (GenerationError, ParseError) as e:
        _log.warning("Generate more %s failed: %s", category, e)
        raise HTTPException(502, f"Failed to generate more {category}: {e}")
    return {"questions": questions}


@app.post("/api/generate-quiz")
async def api_generate_quiz(request: Request):
    body = await _json_body(request)
    transcript = body.get("transcript")
    if not transcript or not isinstance(transcript, str):
        raise HTTPException(400, "Transcript is required")

    try:
        result = await get_processor().process_transcript(transcript, body.get("title"))
    except AllChunksFailedError as e:
        _log.warning("Transcript quiz failed: %s", e)
        raise HTTPException(502, f"Failed to generate quiz: {e}")
    return result.to_dict()


@app.post("/api/summarize")
async def api_summarize(request: Request):
    body = await _json_body(request)
    text = body.get("text")
    if not text or not isinstance(text, str):
        raise HTTPException(400, "Text content is required")

    try:
        summary = await get_processor().summarize(text, body.get("type"), body.get("title"))
    except GenerationError as e:
        _log.warning("Summary failed: %s", e)
        return {"summary": SUMMARY_UNAVAILABLE, "error": str(e)}
    return {"summary": summary}


@app.post("/api/ask")
async def api_ask(request: Request):
    body = await _json_body(request)
    question = body.get("question")
    context = body.get("context")
    if not question or not isinstance(question, str):
        raise HTTPException(400, "Question is required")
    if not context or not isinstance(context, str):
        raise HTTPException(400, "Context is required")

    try:
        answer = await get_processor().answer_question(question, context, body.get("title"))
    except GenerationError as e:
        _log.warning("Answer failed: %s", e)
        raise HTTPException(502, f"Failed to generate answer: {e}")
    return {"answer": answer}


@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await _json_body(request)
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    for k, v in body.items():
        if k in known:
            setattr(s, k, v)
    save_settings(s)
    return s.to_dict()


@app.get("/api/cache")
async def api_cache_stats():
    return get_cache().stats()


@app.delete("/api/cache")
async def api_cache_clear():
    cache = get_cache()
    removed = len(cache)
    cache.clear()
    return {"cleared": removed}
