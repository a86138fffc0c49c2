# FILE: assignment_hub/agent/steps/prompt_composer.py
"""
Compose the assignment generation prompt

Segments, in order: student profile, assignment details, format constraint,
history instruction (omitted without history). The explanation request and
the expected response shape depend only on the assignment purpose.
"""
import json
import logging
from typing import List, Sequence

from assignment_hub.models.assignments import AssignmentCriteria, Purpose, QuestionFormat
from assignment_hub.models.students import StudentProfile

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

EXPLANATION_PURPOSES = frozenset({Purpose.PRACTICE, Purpose.REVISION, Purpose.PRE_TEST})

STRICT_JSON_SUFFIX = (
    "Return ONLY valid JSON. Do not use markdown formatting. Do not include trailing commas."
)

EXPLANATION_REQUEST = (
    'First, provide a clear, concise "explanation" of the topic suitable for the student\'s '
    'grade level. Then, provide an array of 2-3 "examples", where each example is an object '
    'with a "problem" and a "solution".'
)

SHAPE_WITH_EXPLANATION = (
    'Return output as a valid JSON object with three keys: "explanation" (a string), '
    '"examples" (an array of objects), and "questions" (an array of question objects).'
)

SHAPE_QUESTIONS_ONLY = (
    'Return output as a valid JSON object with a single key "questions" which is an array.'
)

QUESTION_SHAPE = (
    'Each question object in the "questions" array must have: "id", "type", "text". '
    'For MCQs, you MUST include an "options" array and a "correctAnswer" key whose value is '
    'exactly one of the options. For other types, you do not need to. '
    'Do not include any markdown or explanatory text outside the JSON.'
)


def includes_explanations(purpose: Purpose) -> bool:
    """Practice, Revision and Pre-Test assignments carry an explanation and examples"""
    return purpose in EXPLANATION_PURPOSES


def _join_or_na(values: Sequence[str]) -> str:
    return ", ".join(values) if values else NOT_AVAILABLE


def build_student_profile_context(student: StudentProfile) -> str:
    return (
        f"The student is in {student.grade or NOT_AVAILABLE}. "
        f"Strengths: {_join_or_na(student.strengths)}. "
        f"Weaknesses: {_join_or_na(student.weaknesses)}. "
        f"Learning Styles: {_join_or_na(student.learning_style)}."
    )


def build_assignment_context(criteria: AssignmentCriteria) -> str:
    return (
        f"Assignment Details: Subject: {criteria.subject}. "
        f"Topics: {criteria.topics}. "
        f"Purpose: {criteria.purpose.value}. "
        f"Difficulty: {criteria.difficulty.value}. "
        f"Number of questions: {criteria.num_questions}."
    )


def build_format_instruction(criteria: AssignmentCriteria) -> str:
    formats = ", ".join(fmt.value for fmt in criteria.formats)
    instruction = (
        f"The assignment must only contain the following question types: {formats}. "
        f'For each question, the "type" field in the JSON must be one of these.'
    )
    if QuestionFormat.MCQ in criteria.formats:
        instruction += (
            ' If "MCQ" is a requested type, you MUST provide an "options" array and a '
            '"correctAnswer" key for that question.'
        )
    return instruction


def build_history_instruction(purpose: Purpose, past_questions: List[str]) -> str:
    """Empty string when the student has no history in this subject"""
    if not past_questions:
        return ""

    listed = json.dumps(past_questions, ensure_ascii=False)
    if purpose == Purpose.REVISION:
        return (
            "This is a revision assignment. Rephrase or present the following past questions "
            "in a new way, but test the same underlying concepts. Do not ask the exact same "
            f"questions. Past questions: {listed}"
        )
    return f"Do not repeat any of the following questions that have been asked before: {listed}"


def compose_assignment_prompt(
    criteria: AssignmentCriteria,
    student: StudentProfile,
    past_questions: List[str]
) -> str:
    """Build the single prompt string sent to the model"""
    with_explanations = includes_explanations(criteria.purpose)

    segments = [
        f"Based on this profile: {build_student_profile_context(student)}",
        f"Create an assignment with these details: {build_assignment_context(criteria)}",
        build_format_instruction(criteria),
    ]

    history_instruction = build_history_instruction(criteria.purpose, past_questions)
    if history_instruction:
        segments.append(history_instruction)

    if with_explanations:
        segments.append(EXPLANATION_REQUEST)

    shape = SHAPE_WITH_EXPLANATION if with_explanations else SHAPE_QUESTIONS_ONLY
    segments.append(f"Instructions: {shape} {QUESTION_SHAPE} {STRICT_JSON_SUFFIX}")

    prompt = " ".join(segments)
    logger.debug(
        f"[PROMPT] purpose={criteria.purpose.value} explanations={with_explanations} "
        f"history={len(past_questions)} chars={len(prompt)}"
    )
    return prompt
