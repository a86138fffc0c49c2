# FILE: tests/test_prompt_composer.py
"""Tests for generation prompt composition"""
from assignment_hub.agent.steps.prompt_composer import (
    NOT_AVAILABLE,
    STRICT_JSON_SUFFIX,
    build_history_instruction,
    build_student_profile_context,
    compose_assignment_prompt,
    includes_explanations,
)
from assignment_hub.models.assignments import AssignmentCriteria, Purpose
from assignment_hub.models.students import StudentProfile


def _criteria(purpose="Practice", formats=("MCQ",)):
    return AssignmentCriteria(
        subject="Science",
        topics="Plants",
        purpose=purpose,
        difficulty="Easy",
        format=list(formats),
        numQuestions=5,
    )


def _student(**overrides):
    data = {"id": "stu_1", "grade": "4th Grade", "strengths": ["Reading"], "weaknesses": []}
    data.update(overrides)
    return StudentProfile(**data)


def test_missing_profile_fields_render_as_not_available():
    context = build_student_profile_context(StudentProfile(id="stu_2"))

    assert f"The student is in {NOT_AVAILABLE}." in context
    assert f"Weaknesses: {NOT_AVAILABLE}." in context
    assert f"Learning Styles: {NOT_AVAILABLE}." in context


def test_explanation_purposes():
    assert includes_explanations(Purpose.PRACTICE)
    assert includes_explanations(Purpose.REVISION)
    assert includes_explanations(Purpose.PRE_TEST)
    assert not includes_explanations(Purpose.CHALLENGE)
    assert not includes_explanations(Purpose.HOMEWORK)


def test_practice_prompt_asks_for_explanation_and_examples():
    prompt = compose_assignment_prompt(_criteria("Practice"), _student(), [])

    assert '"explanation"' in prompt
    assert "three keys" in prompt
    assert "Do not repeat" not in prompt
    assert prompt.endswith(STRICT_JSON_SUFFIX)


def test_challenge_prompt_asks_for_questions_only():
    prompt = compose_assignment_prompt(_criteria("Challenge"), _student(), [])

    assert 'single key "questions"' in prompt
    assert "2-3" not in prompt


def test_mcq_format_requires_options_and_answer_key():
    with_mcq = compose_assignment_prompt(_criteria(formats=("MCQ", "Long Answer")), _student(), [])
    without_mcq = compose_assignment_prompt(_criteria(formats=("Long Answer",)), _student(), [])

    assert 'If "MCQ" is a requested type' in with_mcq
    assert 'If "MCQ" is a requested type' not in without_mcq
    assert "MCQ, Long Answer" in with_mcq


def test_history_instruction_depends_on_purpose():
    past = ["What do plants need to grow?"]

    revision = build_history_instruction(Purpose.REVISION, past)
    practice = build_history_instruction(Purpose.PRACTICE, past)

    assert revision.startswith("This is a revision assignment.")
    assert 'Past questions: ["What do plants need to grow?"]' in revision
    assert practice.startswith("Do not repeat any of the following questions")
    assert build_history_instruction(Purpose.PRACTICE, []) == ""


def test_history_is_embedded_after_format_instruction():
    prompt = compose_assignment_prompt(_criteria(), _student(), ["Name a root vegetable."])

    assert prompt.index("question types") < prompt.index("Do not repeat")


def test_same_inputs_give_same_prompt():
    criteria, student = _criteria(), _student()
    assert compose_assignment_prompt(criteria, student, ["a"]) == compose_assignment_prompt(criteria, student, ["a"])
