# FILE: assignment_hub/agent/steps/feedback.py
"""
Feedback step: one-sentence suggestion for the parent after grading

The suggestion is best effort. Any failure falls back to a fixed text so that
grading completes regardless.
"""
import json
import logging
import re
from typing import Sequence

from assignment_hub.config import Settings
from assignment_hub.errors import LLMUnavailableError
from assignment_hub.models.assignments import Question
from assignment_hub.providers.registry import ProviderRegistry
from assignment_hub.services.correlation import get_correlation_id

logger = logging.getLogger(__name__)

MAX_SUGGESTION_CHARS = 500

_WRAPPING_QUOTES = "\"'“”‘’"


def build_feedback_prompt(topics: str, score: int, questions: Sequence[Question]) -> str:
    graded = [
        {
            "text": q.text,
            "type": q.type.value,
            "studentAnswer": q.student_answer,
            "correctAnswer": q.correct_answer,
            "isCorrect": q.is_correct,
        }
        for q in questions
    ]
    return (
        f'A student completed an assignment on "{topics}". Their score was {score}%. '
        f"Here are the questions and their answers: {json.dumps(graded, ensure_ascii=False)}. "
        "Provide a brief, one-sentence suggestion for the parent on what the student should "
        "focus on next. Reply with the sentence only."
    )


def clean_suggestion(text: str) -> str:
    """Strip fences, wrapping quotes and extra whitespace; '' if nothing usable remains"""
    cleaned = re.sub(r"```[a-zA-Z]*", "", text or "")
    cleaned = " ".join(cleaned.split())
    cleaned = cleaned.strip(_WRAPPING_QUOTES).strip()
    if len(cleaned) > MAX_SUGGESTION_CHARS:
        return ""
    return cleaned


class FeedbackRequester:
    """Asks the model for a forward-looking suggestion"""

    def __init__(self, registry: ProviderRegistry, settings: Settings):
        self.registry = registry
        self.settings = settings

    @property
    def fallback(self) -> str:
        return self.settings.feedback_fallback_text

    async def request_suggestion(
        self,
        topics: str,
        score: int,
        questions: Sequence[Question]
    ) -> str:
        """Return the model's suggestion, or the fallback text on any failure"""
        correlation_id = get_correlation_id()
        prompt = build_feedback_prompt(topics, score, questions)

        try:
            response = await self.registry.generate(
                prompt=prompt,
                temperature=self.settings.feedback_temperature,
                max_tokens=self.settings.feedback_max_tokens,
                correlation_id=correlation_id
            )
        except LLMUnavailableError as e:
            logger.warning(f"[{correlation_id}] [FEEDBACK] Unavailable, using fallback: {e}")
            return self.fallback
        except Exception as e:
            logger.error(f"[{correlation_id}] [FEEDBACK] Failed, using fallback: {e}", exc_info=True)
            return self.fallback

        suggestion = clean_suggestion(response.get("text") or "")
        if not suggestion:
            logger.warning(f"[{correlation_id}] [FEEDBACK] Unusable response, using fallback")
            return self.fallback

        logger.info(f"[{correlation_id}] [FEEDBACK] Suggestion generated via {response.get('provider')}")
        return suggestion
