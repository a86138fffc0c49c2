# FILE: assignment_hub/agent/steps/topics.py
"""
Topic suggestions for parents building an assignment and for students
exploring a subject on their own
"""
import logging
from typing import List

from pydantic import ValidationError

from assignment_hub.agent.steps.prompt_composer import STRICT_JSON_SUFFIX
from assignment_hub.config import Settings
from assignment_hub.errors import LLMUnavailableError
from assignment_hub.models.assignments import TopicInsight
from assignment_hub.models.students import StudentProfile
from assignment_hub.providers.registry import ProviderRegistry
from assignment_hub.services.correlation import get_correlation_id
from assignment_hub.services.response_sanitizer import extract_json_object

logger = logging.getLogger(__name__)

EXPLORE_TOPIC_COUNT = 5


def build_topic_suggestion_prompt(grade: str, subject: str) -> str:
    return (
        "You are an expert curriculum planner for the U.S. education system. "
        "A parent is creating an assignment for their child. "
        f"Student's Grade: {grade}. Subject: {subject}. "
        "Generate a list of 20-25 relevant academic topics for this subject. The list should "
        "include topics appropriate for the student's current grade level, as well as some more "
        "challenging topics from one or two grades above to help them get ahead. "
        'Return the output as a single, clean JSON object with one key: "topics". '
        "The value should be an array of strings. "
        'For example: {"topics": ["Topic 1", "Topic 2", "Advanced Topic 3"]}. '
        f"Do not include any other text or markdown formatting. {STRICT_JSON_SUFFIX}"
    )


def build_topic_explorer_prompt(grade: str, subject: str) -> str:
    return (
        f'A {grade} student wants to learn about "{subject}". '
        f"Suggest {EXPLORE_TOPIC_COUNT} specific topics. For each topic, provide a brief "
        '"explanation", a simple "example", and a "quickTip". Return a JSON object with a '
        '"topics" array where each element is an object with "topicName", "explanation", '
        f'"example", and "quickTip" keys. {STRICT_JSON_SUFFIX}'
    )


class TopicAdvisor:
    """Topic lists are a convenience; failures yield an empty list"""

    def __init__(self, registry: ProviderRegistry, settings: Settings):
        self.registry = registry
        self.settings = settings

    async def _ask(self, prompt: str) -> list:
        correlation_id = get_correlation_id()
        try:
            response = await self.registry.generate(
                prompt=prompt,
                temperature=self.settings.generation_temperature,
                max_tokens=self.settings.generation_max_tokens,
                correlation_id=correlation_id
            )
        except LLMUnavailableError as e:
            logger.warning(f"[{correlation_id}] [TOPICS] Topic suggestion failed: {e}")
            return []

        data = extract_json_object(response.get("text"))
        topics = (data or {}).get("topics")
        return topics if isinstance(topics, list) else []

    async def suggest_topics(self, student: StudentProfile, subject: str) -> List[str]:
        """20-25 topic names at and slightly above the student's grade"""
        raw_topics = await self._ask(build_topic_suggestion_prompt(student.grade or "N/A", subject))

        topics: List[str] = []
        for topic in raw_topics:
            if isinstance(topic, str) and topic.strip() and topic.strip() not in topics:
                topics.append(topic.strip())

        logger.info(f"[TOPICS] {len(topics)} topics suggested for {subject}")
        return topics

    async def explore_topics(self, student: StudentProfile, subject: str) -> List[TopicInsight]:
        """A handful of topics with an explanation, example and tip each"""
        raw_topics = await self._ask(build_topic_explorer_prompt(student.grade or "N/A", subject))

        insights: List[TopicInsight] = []
        for raw in raw_topics:
            if not isinstance(raw, dict):
                continue
            try:
                insights.append(TopicInsight.model_validate(raw))
            except ValidationError as e:
                logger.debug(f"[TOPICS] Skipping malformed topic entry: {e}")

        logger.info(f"[TOPICS] {len(insights)} topics to explore for {subject}")
        return insights
