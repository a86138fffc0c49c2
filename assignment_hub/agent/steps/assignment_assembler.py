# FILE: assignment_hub/agent/steps/assignment_assembler.py
"""
Assignment assembly: model output -> validated, persisted assignment

Process:
1. Look up the student's past questions in the subject
2. Compose the prompt and call the model
3. Sanitize the response into a GenerationResult
4. Normalize questions, attach explanation/examples when the purpose asks
   for them, and persist with status NotStarted

Nothing is written unless step 4 produced at least one valid question.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from assignment_hub.agent.steps.prompt_composer import compose_assignment_prompt, includes_explanations
from assignment_hub.config import Settings
from assignment_hub.errors import GenerationFailed, LLMUnavailableError
from assignment_hub.models.assignments import (
    Assignment,
    AssignmentCriteria,
    AssignmentStatus,
    Example,
    GenerationResult,
    Question,
    QuestionFormat,
)
from assignment_hub.models.students import StudentProfile
from assignment_hub.providers.registry import ProviderRegistry
from assignment_hub.services.correlation import get_correlation_id
from assignment_hub.services.document_store import DocumentStore
from assignment_hub.services.history_lookup import ASSIGNMENTS_COLLECTION, get_past_questions
from assignment_hub.services.response_sanitizer import sanitize_generation_response

logger = logging.getLogger(__name__)

TEXT_KEYS = ("text", "question", "question_text")
ANSWER_KEYS = ("correctAnswer", "correct_answer", "answer", "answer_key")
LETTER_ANSWER = re.compile(r"(?:option\s*)?([A-Za-z])[).:]?", flags=re.IGNORECASE)


def _first_text(raw: Dict[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            text = str(value).strip()
            if text:
                return text
    return ""


def _coerce_options(raw_options: Any) -> List[str]:
    if not isinstance(raw_options, list):
        return []
    options = []
    for option in raw_options:
        if isinstance(option, dict):
            # {"label": "A", "text": "..."} style
            option = option.get("text")
        if option is None or isinstance(option, bool):
            continue
        text = str(option).strip()
        if text:
            options.append(text)
    return options


def resolve_correct_answer(answer: str, options: List[str]) -> Optional[str]:
    """Map the model's answer onto one of the options, or None"""
    if not answer:
        return None
    if answer in options:
        return answer

    lowered = answer.casefold()
    for option in options:
        if option.casefold() == lowered:
            return option

    match = LETTER_ANSWER.fullmatch(answer)
    if match:
        index = ord(match.group(1).upper()) - ord("A")
        if 0 <= index < len(options):
            return options[index]
    return None


def normalize_question(raw: Dict[str, Any], requested: List[QuestionFormat]) -> Optional[Dict[str, Any]]:
    """
    Reduce one raw question dict to Question fields (without a final id).

    Returns None for questions that cannot be made valid.
    """
    try:
        qtype = QuestionFormat(raw.get("type"))
    except ValueError:
        logger.warning(f"[ASSEMBLE] Dropping question with unknown type {raw.get('type')!r}")
        return None

    if qtype not in requested:
        logger.warning(f"[ASSEMBLE] Dropping {qtype.value} question; not a requested format")
        return None

    text = _first_text(raw, TEXT_KEYS)
    if not text:
        logger.warning("[ASSEMBLE] Dropping question with no text")
        return None

    fields: Dict[str, Any] = {
        "id": _first_text(raw, ("id",)),
        "type": qtype,
        "text": text,
        "student_answer": "",
        "is_correct": None,
    }

    if qtype == QuestionFormat.MCQ:
        options = _coerce_options(raw.get("options"))
        answer = resolve_correct_answer(_first_text(raw, ANSWER_KEYS), options)
        if not options or answer is None:
            logger.warning(f"[ASSEMBLE] Dropping MCQ without a usable answer key: {text[:80]!r}")
            return None
        fields["options"] = options
        fields["correct_answer"] = answer

    return fields


def assign_question_ids(questions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the first occurrence of each model id; give everything else a fresh q<N> id"""
    used = set()
    needs_id = []
    for fields in questions:
        qid = fields.get("id")
        if qid and qid not in used:
            used.add(qid)
        else:
            needs_id.append(fields)

    counter = 1
    for fields in needs_id:
        while f"q{counter}" in used:
            counter += 1
        fields["id"] = f"q{counter}"
        used.add(fields["id"])
    return questions


def normalize_examples(raw_examples: List[Dict[str, Any]]) -> List[Example]:
    examples = []
    for raw in raw_examples:
        problem = _first_text(raw, ("problem",))
        solution = _first_text(raw, ("solution",))
        if problem or solution:
            examples.append(Example(problem=problem, solution=solution))
    return examples


def assemble_assignment(
    criteria: AssignmentCriteria,
    student_id: str,
    parent_id: Optional[str],
    result: GenerationResult
) -> Assignment:
    """
    Build a NotStarted Assignment from sanitized model output.

    Raises:
        GenerationFailed when no valid question survives
    """
    if result.is_empty_fallback or not result.questions:
        raise GenerationFailed(
            "The model did not return any questions",
            detail={"outcome": result.outcome.value}
        )

    normalized = [
        fields for fields in (normalize_question(raw, criteria.formats) for raw in result.questions)
        if fields is not None
    ]

    questions: List[Question] = []
    for fields in assign_question_ids(normalized):
        try:
            questions.append(Question(**fields))
        except ValidationError as e:
            logger.warning(f"[ASSEMBLE] Dropping invalid question {fields.get('id')}: {e}")

    if not questions:
        raise GenerationFailed(
            "None of the generated questions were usable",
            detail={"received": len(result.questions)}
        )

    with_explanations = includes_explanations(criteria.purpose)
    assignment = Assignment(
        student_id=student_id,
        parent_id=parent_id,
        subject=criteria.subject,
        topics=criteria.topics,
        purpose=criteria.purpose,
        difficulty=criteria.difficulty,
        formats=list(criteria.formats),
        num_questions=criteria.num_questions,
        created_by=criteria.created_by,
        questions=questions,
        status=AssignmentStatus.NOT_STARTED,
        explanation=result.explanation if with_explanations else None,
        examples=normalize_examples(result.examples) if with_explanations else None,
    )

    if len(questions) != criteria.num_questions:
        logger.info(
            f"[ASSEMBLE] Requested {criteria.num_questions} questions, kept {len(questions)}"
        )
    return assignment


class AssignmentAssembler:
    """Runs the generation pipeline for one request"""

    def __init__(self, store: DocumentStore, registry: ProviderRegistry, settings: Settings):
        self.store = store
        self.registry = registry
        self.settings = settings

    async def generate(
        self,
        criteria: AssignmentCriteria,
        student: StudentProfile,
        parent_id: Optional[str]
    ) -> str:
        """
        Generate and persist an assignment.

        Returns:
            The new assignment id

        Raises:
            GenerationFailed: model unavailable or no usable questions
            StoreUnavailable: history read or create failed
        """
        correlation_id = get_correlation_id()
        logger.info(
            f"[{correlation_id}] [GENERATE] student={student.id} subject={criteria.subject} "
            f"purpose={criteria.purpose.value} n={criteria.num_questions}"
        )

        past_questions = await get_past_questions(self.store, student.id, criteria.subject)
        prompt = compose_assignment_prompt(criteria, student, past_questions)

        try:
            response = await self.registry.generate(
                prompt=prompt,
                temperature=self.settings.generation_temperature,
                max_tokens=self.settings.generation_max_tokens,
                correlation_id=correlation_id
            )
        except LLMUnavailableError as e:
            logger.error(f"[{correlation_id}] [GENERATE] Model call failed: {e}")
            raise GenerationFailed("Failed to generate assignment. Please try again.", detail=str(e)) from e

        text = response.get("text") or ""
        if not text.strip():
            raise GenerationFailed("Invalid response from AI.")

        result = sanitize_generation_response(text)
        assignment = assemble_assignment(criteria, student.id, parent_id, result)

        assignment_id = await self.store.create(ASSIGNMENTS_COLLECTION, assignment.to_record())
        logger.info(
            f"[{correlation_id}] [GENERATE] Created assignment {assignment_id} "
            f"with {len(assignment.questions)} questions via {response.get('provider')}"
        )
        return assignment_id
