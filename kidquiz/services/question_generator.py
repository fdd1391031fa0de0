import logging

from kidquiz.config import settings
from kidquiz.exceptions import GenerationError
from kidquiz.llm.client import chat_completion
from kidquiz.llm.parser import parse_questions
from kidquiz.llm.prompts import QUIZ_RESPONSE_FORMAT, STRICT_SUFFIX, build_quiz_prompt
from kidquiz.models import Question, Subject

logger = logging.getLogger(__name__)


async def generate_questions(subject: Subject, count: int | None = None) -> list[Question]:
    """Generate a question set for the subject. Raises GenerationError on failure."""
    count = count or settings.QUESTION_COUNT
    prompt = build_quiz_prompt(subject, count)

    # First attempt
    try:
        raw = await chat_completion(prompt, response_format=QUIZ_RESPONSE_FORMAT)
        return parse_questions(raw, count)
    except GenerationError as e:
        logger.info("First attempt failed (%s), retrying...", e)

    # Retry once with a stricter prompt
    try:
        raw = await chat_completion(prompt + STRICT_SUFFIX, response_format=QUIZ_RESPONSE_FORMAT)
        return parse_questions(raw, count)
    except GenerationError:
        logger.error("Failed to generate %s quiz after 2 attempts", subject.name)
        raise
