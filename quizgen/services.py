import json
import logging
import re
from typing import Any, Dict, List, Optional

from quizgen.models import QuestionRecord, QuizResponse
from quizgen.prompts import SYSTEM_PROMPT, build_quiz_prompt
from quizgen.providers import CompletionProvider

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
LOG_PREVIEW_CHARS = 200


class QuizGenerationError(Exception):
    pass


class InvalidRequest(QuizGenerationError):
    pass


class ProviderCallFailure(QuizGenerationError):
    pass


class MalformedProviderText(QuizGenerationError):
    pass


class InvalidProviderResponse(QuizGenerationError):
    pass


def starting_id_for(batch: int) -> int:
    return (batch - 1) * BATCH_SIZE + 1


def has_more_batches(batch: int, total_questions: int) -> bool:
    # Based on the requested batch and total, not on what was delivered.
    return batch * BATCH_SIZE < total_questions


def _preview(text: str) -> str:
    return text[:LOG_PREVIEW_CHARS] + "..."


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and its closing ``` from a reply."""
    cleaned = text.strip()

    if cleaned.startswith("```json"):
        cleaned = re.sub(r"```json\n?", "", cleaned, count=1)
        cleaned = re.sub(r"\n?```$", "", cleaned)
        logger.debug("Cleaned json markdown formatting")

    if cleaned.startswith("```"):
        cleaned = re.sub(r"```\n?", "", cleaned, count=1)
        cleaned = re.sub(r"\n?```$", "", cleaned)
        logger.debug("Cleaned generic markdown formatting")

    return cleaned


def fallback_questions(topic: str, starting_id: int) -> List[Dict[str, Any]]:
    return [
        {
            "id": starting_id,
            "question": f"Which practice matters most when working with {topic} in a real project?",
            "options": [
                "Understanding the core concepts before applying them",
                "Memorizing syntax without context",
                "Skipping documentation",
                "Avoiding testing",
            ],
            "correctAnswers": [0],
            "multipleChoice": False,
            "difficulty": "medium",
            "explanation": f"A solid grasp of the fundamentals of {topic} is what makes everything else work.",
            "category": topic,
        }
    ]


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def _text(value: Any, default: str) -> str:
    if not value:
        return default
    return value if isinstance(value, str) else str(value)


def _question_id(value: Any, default: int):
    if isinstance(value, bool) or not value:
        return default
    if isinstance(value, (int, str)):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def normalize_question(raw: Any, index: int, starting_id: int, topic: str) -> QuestionRecord:
    """Map one decoded element onto a QuestionRecord. Never raises."""
    q = raw if isinstance(raw, dict) else {}

    options = q.get("options")
    correct_answers = q.get("correctAnswers")

    return QuestionRecord(
        id=_question_id(q.get("id"), starting_id + index),
        question=_text(q.get("question"), ""),
        options=options if isinstance(options, list) else [],
        correct_answers=correct_answers if isinstance(correct_answers, list) else [0],
        multiple_choice=bool(q.get("multipleChoice") or False),
        difficulty=_text(q.get("difficulty"), "medium"),
        explanation=_text(q.get("explanation"), ""),
        category=_text(q.get("category"), topic),
    )


def normalize_questions(items: List[Any], starting_id: int, topic: str) -> List[QuestionRecord]:
    return [normalize_question(item, index, starting_id, topic) for index, item in enumerate(items)]


class QuizBatchGenerator:
    def __init__(
        self,
        provider: CompletionProvider,
        max_tokens: int = 3000,
        temperature: float = 0.3,
        parse_fallback: bool = True,
    ):
        self.provider = provider
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.parse_fallback = parse_fallback

    @staticmethod
    def _validate(topic, num_questions, batch, total_questions):
        if not topic or not isinstance(num_questions, int) or num_questions <= 0:
            raise InvalidRequest("Topic and number of questions are required")
        if not isinstance(batch, int) or batch <= 0:
            raise InvalidRequest("Batch must be a positive integer")
        if total_questions is not None and (not isinstance(total_questions, int) or total_questions <= 0):
            raise InvalidRequest("Total questions must be a positive integer")

    async def _complete(self, prompt: str) -> str:
        try:
            return await self.provider.complete(
                system_prompt=SYSTEM_PROMPT,
                user_prompt=prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            raise ProviderCallFailure(str(e)) from e

    def _decode(self, cleaned: str, topic: str, starting_id: int):
        """Returns (decoded value, whether the fallback was used)."""
        try:
            return json.loads(cleaned, parse_constant=_reject_constant), False
        except (ValueError, RecursionError) as e:
            logger.error(f"Failed to parse provider response as JSON: {cleaned}")
            logger.error(f"Parse error: {e}")
            if not self.parse_fallback:
                raise MalformedProviderText(f"Provider reply is not valid JSON: {e}") from e
            return fallback_questions(topic, starting_id), True

    async def generate(
        self,
        topic: Optional[str],
        num_questions: Optional[int],
        batch: int = 1,
        total_questions: Optional[int] = None,
    ) -> QuizResponse:
        self._validate(topic, num_questions, batch, total_questions)
        if total_questions is None:
            total_questions = num_questions

        limited_questions = min(num_questions, BATCH_SIZE)
        starting_id = starting_id_for(batch)
        logger.info(
            f"Generating quiz batch {batch} for topic: {topic} with {limited_questions} questions "
            f"(limited from {num_questions}) - Total target: {total_questions}"
        )

        prompt = build_quiz_prompt(topic, limited_questions, batch, starting_id)
        raw = (await self._complete(prompt)).strip()
        logger.info(f"Raw provider response: {_preview(raw)}")

        cleaned = strip_code_fences(raw)
        logger.info(f"Cleaned response: {_preview(cleaned)}")

        questions, used_fallback = self._decode(cleaned, topic, starting_id)

        if not isinstance(questions, list) or len(questions) == 0:
            raise InvalidProviderResponse("Invalid question format received")

        records = normalize_questions(questions, starting_id, topic)

        return QuizResponse(
            success=True,
            questions=records,
            topic=topic,
            batch=batch,
            questions_in_batch=len(records),
            total_questions=total_questions,
            has_more_batches=has_more_batches(batch, total_questions),
            used_fallback=used_fallback,
        )
