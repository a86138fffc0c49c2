# FILE: tests/test_history_lookup.py
"""Tests for past question lookup"""
import pytest

from assignment_hub.services.history_lookup import ASSIGNMENTS_COLLECTION, get_past_questions


@pytest.mark.asyncio
async def test_past_questions_are_scoped_to_student_and_subject(store):
    await store.create(ASSIGNMENTS_COLLECTION, {
        "studentId": "stu_1", "subject": "Math",
        "questions": [{"id": "q1", "text": "What is 2 + 2?"}, {"id": "q2", "text": "What is 3 x 3?"}],
    })
    await store.create(ASSIGNMENTS_COLLECTION, {
        "studentId": "stu_1", "subject": "Math",
        "questions": [{"id": "q1", "text": "What is 2 + 2?"}],
    })
    await store.create(ASSIGNMENTS_COLLECTION, {
        "studentId": "stu_1", "subject": "Science",
        "questions": [{"id": "q1", "text": "Name a planet."}],
    })
    await store.create(ASSIGNMENTS_COLLECTION, {
        "studentId": "stu_2", "subject": "Math",
        "questions": [{"id": "q1", "text": "What is 5 - 1?"}],
    })

    past = await get_past_questions(store, "stu_1", "Math")

    # Duplicates are kept
    assert sorted(past) == ["What is 2 + 2?", "What is 2 + 2?", "What is 3 x 3?"]


@pytest.mark.asyncio
async def test_no_history_is_empty(store):
    assert await get_past_questions(store, "stu_9", "Math") == []


@pytest.mark.asyncio
async def test_malformed_question_entries_are_skipped(store):
    await store.create(ASSIGNMENTS_COLLECTION, {
        "studentId": "stu_1", "subject": "Math",
        "questions": ["loose string", {"id": "q1"}, {"id": "q2", "text": "  "}, {"id": "q3", "text": "Kept"}],
    })

    assert await get_past_questions(store, "stu_1", "Math") == ["Kept"]
