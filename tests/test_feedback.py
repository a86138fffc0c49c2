# FILE: tests/test_feedback.py
"""Tests for the post-grading suggestion"""
import pytest

from assignment_hub.agent.steps.feedback import FeedbackRequester, build_feedback_prompt, clean_suggestion
from assignment_hub.models.assignments import Question, QuestionFormat


@pytest.fixture
def graded_questions():
    return [
        Question(
            id="q1", type=QuestionFormat.MCQ, text="What is 1/2 + 1/4?",
            options=["1/4", "3/4"], correct_answer="3/4", student_answer="1/4", is_correct=False,
        ),
        Question(id="q2", type=QuestionFormat.SHORT_ANSWER, text="Explain decimals.", student_answer="Parts"),
    ]


def test_prompt_mentions_topics_score_and_answers(graded_questions):
    prompt = build_feedback_prompt("Fractions", 50, graded_questions)

    assert '"Fractions"' in prompt
    assert "50%" in prompt
    assert '"studentAnswer": "1/4"' in prompt
    assert "one-sentence" in prompt


def test_clean_suggestion():
    assert clean_suggestion('"Practice adding fractions."') == "Practice adding fractions."
    assert clean_suggestion("```\nReview   decimals.\n```") == "Review decimals."
    assert clean_suggestion("   ") == ""
    assert clean_suggestion("x" * 600) == ""


@pytest.mark.asyncio
async def test_suggestion_from_model(registry, settings, fake_provider, graded_questions):
    fake_provider.queue("Focus on finding common denominators.")
    requester = FeedbackRequester(registry, settings)

    suggestion = await requester.request_suggestion("Fractions", 50, graded_questions)

    assert suggestion == "Focus on finding common denominators."


@pytest.mark.asyncio
async def test_transport_failure_falls_back(registry, settings, fake_provider, graded_questions):
    fake_provider.queue(TimeoutError("upstream timed out"))
    requester = FeedbackRequester(registry, settings)

    assert await requester.request_suggestion("Fractions", 50, graded_questions) == "Good effort!"


@pytest.mark.asyncio
async def test_empty_reply_falls_back(registry, settings, fake_provider, graded_questions):
    fake_provider.queue("")
    requester = FeedbackRequester(registry, settings)

    assert await requester.request_suggestion("Fractions", 50, graded_questions) == "Good effort!"


@pytest.mark.asyncio
async def test_unexpected_error_falls_back(settings, graded_questions):
    class BrokenRegistry:
        async def generate(self, **kwargs):
            raise KeyError("text")

    requester = FeedbackRequester(BrokenRegistry(), settings)
    assert await requester.request_suggestion("Fractions", 0, graded_questions) == "Good effort!"
