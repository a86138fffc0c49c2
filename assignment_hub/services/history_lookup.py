# FILE: assignment_hub/services/history_lookup.py
"""
Prior questions a student has already seen in a subject
"""
import logging
from typing import List

from assignment_hub.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

ASSIGNMENTS_COLLECTION = "assignments"


async def get_past_questions(store: DocumentStore, student_id: str, subject: str) -> List[str]:
    """
    Flatten question texts of every assignment matching student and subject.

    Order is not meaningful and duplicates are kept; the model is told to
    avoid exact repeats.
    """
    records = await store.query(ASSIGNMENTS_COLLECTION, studentId=student_id, subject=subject)

    past_questions: List[str] = []
    for record in records:
        for question in record.get("questions") or []:
            if not isinstance(question, dict):
                continue
            text = question.get("text")
            if isinstance(text, str) and text.strip():
                past_questions.append(text)

    logger.debug(
        f"[HISTORY] {len(past_questions)} past questions for student={student_id} subject={subject}"
    )
    return past_questions
