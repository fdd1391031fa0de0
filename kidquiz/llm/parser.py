import json
import logging
import re
from typing import Any

from kidquiz.exceptions import GenerationError
from kidquiz.models import Question, question_from_payload

logger = logging.getLogger(__name__)


def parse_questions(raw_text: str, count: int) -> list[Question]:
    """
    Parse generator output into exactly `count` questions.

    Extra questions are dropped; fewer than `count`, or any record that does not
    match the schema, fails the whole set.

    Raises:
        GenerationError: output is not a usable question set
    """
    if not raw_text:
        raise GenerationError("Empty response from generator")

    # Try direct JSON parse
    records = _try_parse_json(raw_text)

    # Try extracting from markdown code block
    if records is None:
        match = re.search(r"```(?:json)?\s*([\[{].+?[\]}])\s*```", raw_text, re.DOTALL)
        if match:
            records = _try_parse_json(match.group(1))

    # Try finding array in the text
    if records is None:
        match = re.search(r"(\[\s*\{.+}\s*])", raw_text, re.DOTALL)
        if match:
            records = _try_parse_json(match.group(1))

    if records is None:
        logger.error("Failed to parse LLM response as JSON")
        raise GenerationError("Generator response is not a JSON question list")

    if len(records) < count:
        raise GenerationError(f"Expected {count} questions, got {len(records)}")

    return [question_from_payload(raw, i) for i, raw in enumerate(records[:count], 1)]


def _try_parse_json(text: str) -> list[Any] | None:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    # Structured output wraps the array: {"questions": [...]}
    if isinstance(data, dict) and isinstance(data.get("questions"), list):
        return data["questions"]
    if isinstance(data, list):
        return data
    return None
