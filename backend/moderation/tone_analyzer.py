"""
Tone analysis for co-parenting messages.

Scores how constructive or hostile a message is. With ENABLE_LLM=true the
message is rated by an Ollama model with structured output; otherwise a
keyword heuristic is used. Both paths return the same ToneAnalysis shape.
"""

import os
import time
from typing import Any

from ollama import Client
from pydantic import ValidationError

from config.tone_keywords import TONE_KEYWORDS_DICT
from models import ToneAnalysis

MAX_LLM_RETRIES = 3  # Maximum retry attempts for failed LLM calls
MAX_MESSAGE_CHARS = 4000  # Chat messages longer than this are truncated before rating

NEUTRAL_FALLBACK = ToneAnalysis(score=0.5, label="neutral", warning=False)

SYSTEM_PROMPT = """You are a tone analyzer for co-parenting communication. Analyze the tone of messages and respond with JSON only.

Rate the message tone on these criteria:
- score: 0.0 (very hostile) to 1.0 (very positive/constructive)
- label: "negative", "neutral", or "positive"
- warning: true if the message contains hostile, accusatory, or inflammatory language
- suggestion: Brief suggestion to improve tone if needed (null if tone is good)

Respond ONLY with valid JSON, no other text."""

# Ollama calls can hang indefinitely without a client timeout
ollama_client = Client(host=os.getenv("OLLAMA_HOST"), timeout=60.0)


def llm_enabled() -> bool:
    return os.getenv("ENABLE_LLM", "false").lower() == "true"


def analyze_keywords(message: str) -> ToneAnalysis:
    """
    Score a message by counting hostile and cooperative words.

    Each listed word counts once if it appears anywhere in the lower-cased
    message (substring match, so "helpful" counts as "help").
    """
    lower_message = message.lower()
    counts = {
        tone: sum(1 for word in words if word in lower_message)
        for tone, words in TONE_KEYWORDS_DICT.items()
    }
    negative_count = counts["negative"]
    positive_count = counts["positive"]

    if negative_count > positive_count + 1:
        score, label = 0.3, "negative"
    elif positive_count > negative_count:
        score, label = 0.8, "positive"
    else:
        score, label = 0.5, "neutral"

    return ToneAnalysis(score=score, label=label, warning=negative_count > 2)


def call_llm(
    model: str,
    message: str,
    schema: dict[str, object],
    max_retries: int = MAX_LLM_RETRIES,
) -> str:
    """
    Call Ollama with structured output and exponential backoff retry logic.

    Retries with exponential backoff (1s, 2s) on failure and validates that
    the response is non-empty.

    Args:
        model: Ollama model name (e.g., "llama3.1:8b")
        message: Chat message to rate
        schema: Pydantic model JSON schema for structured output format
        max_retries: Maximum retry attempts on failure

    Returns:
        JSON string response from the LLM

    Raises:
        Exception: If all retry attempts fail or the LLM returns an empty response
    """
    for attempt in range(max_retries):
        try:
            response = ollama_client.chat(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f'Analyze this message: "{message}"'},
                ],
                format=schema,
                options={"temperature": 0},
            )
            content = response.message.content

            if not content or content.strip() == "":
                raise ValueError("LLM returned empty response")

            return content

        except Exception as e:
            if attempt < max_retries - 1:
                wait_time = 2**attempt
                print(
                    f"  ⚠ Attempt {attempt + 1} failed: {e}. Retrying in {wait_time}s..."
                )
                time.sleep(wait_time)
            else:
                raise Exception(f"LLM call failed after {max_retries} attempts: {e}")

    raise Exception("Unreachable code: all retry attempts exhausted")


def analyze_with_llm(message: str, model: str) -> ToneAnalysis:
    """
    Rate a message with the language model.

    A reply that is not a valid ToneAnalysis falls back to neutral. Transport
    failures (after retries) propagate.
    """
    if len(message) > MAX_MESSAGE_CHARS:
        message = message[:MAX_MESSAGE_CHARS]

    content = call_llm(model, message, ToneAnalysis.model_json_schema())

    try:
        return ToneAnalysis.model_validate_json(content)
    except ValidationError as e:
        print(f"  ⚠ Tone reply was not valid JSON, using neutral fallback: {e}")
        return NEUTRAL_FALLBACK


def analyze_tone(message: Any) -> dict[str, Any]:
    """
    Analyze the tone of a chat message.

    Args:
        message: Message text from the request body

    Returns:
        Dict with score, label, warning and (LLM only) suggestion

    Raises:
        ValueError: If the message is missing, empty, or not a string
    """
    if not message or not isinstance(message, str):
        raise ValueError("Message is required")

    if llm_enabled():
        model = os.getenv("OLLAMA_MODEL", "llama3.1:8b")
        analysis = analyze_with_llm(message, model)
    else:
        analysis = analyze_keywords(message)

    return analysis.model_dump(exclude_none=True)
