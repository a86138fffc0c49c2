# FILE: assignment_hub/services/assignment_service.py
"""
Assignment lifecycle: generate, start, save progress, submit, comment

Status only moves forward (NotStarted -> InProgress -> Completed). Every
write that derives from a read is made with the version that was read, so a
save racing a submit fails with VersionConflict instead of overwriting.
"""
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from assignment_hub.agent.steps.assignment_assembler import AssignmentAssembler
from assignment_hub.agent.steps.feedback import FeedbackRequester
from assignment_hub.config import Settings
from assignment_hub.errors import (
    AssignmentNotFound,
    InvalidStatusTransition,
    StudentNotFound,
    VersionConflict,
)
from assignment_hub.models.assignments import (
    Assignment,
    AssignmentCriteria,
    AssignmentStatus,
    AssignmentTemplate,
    Question,
    utcnow,
)
from assignment_hub.models.students import StudentProfile
from assignment_hub.services.document_store import DocumentNotFound, DocumentStore
from assignment_hub.services.grading import grade_questions
from assignment_hub.services.history_lookup import ASSIGNMENTS_COLLECTION

logger = logging.getLogger(__name__)

STUDENTS_COLLECTION = "students"
TEMPLATES_COLLECTION = "assignmentTemplates"


def merge_answers(questions: List[Question], answers: Dict[str, str]) -> List[Question]:
    """Apply submitted answers by question id; unanswered questions keep their saved answer"""
    known = {q.id for q in questions}
    unknown = set(answers) - known
    if unknown:
        logger.debug(f"Ignoring answers for unknown questions: {sorted(unknown)}")

    return [
        q.model_copy(update={"student_answer": answers[q.id]}) if q.id in answers else q
        for q in questions
    ]


class AssignmentService:
    """Coordinates the pipeline steps against the document store"""

    def __init__(
        self,
        store: DocumentStore,
        assembler: AssignmentAssembler,
        feedback: FeedbackRequester,
        settings: Settings
    ):
        self.store = store
        self.assembler = assembler
        self.feedback = feedback
        self.settings = settings

    async def load_student(self, student_id: str) -> StudentProfile:
        record = await self.store.get(STUDENTS_COLLECTION, student_id)
        if record is None:
            raise StudentNotFound(f"Student {student_id} not found")
        return StudentProfile.model_validate({**record, "id": student_id})

    async def generate_assignment(
        self,
        student_id: str,
        criteria: AssignmentCriteria,
        parent_id: Optional[str] = None
    ) -> Assignment:
        """Generate, persist and return a new assignment"""
        student = await self.load_student(student_id)
        # Self-assessments are owned by the student's parent
        owner_parent_id = parent_id or student.parent_id
        assignment_id = await self.assembler.generate(criteria, student, owner_parent_id)
        return await self.get_assignment(assignment_id)

    async def get_assignment(self, assignment_id: str) -> Assignment:
        record = await self.store.get(ASSIGNMENTS_COLLECTION, assignment_id)
        if record is None:
            raise AssignmentNotFound(f"Assignment {assignment_id} not found")
        return Assignment.from_record({**record, "id": assignment_id})

    async def list_assignments(
        self,
        student_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        subject: Optional[str] = None,
        status: Optional[AssignmentStatus] = None
    ) -> List[Assignment]:
        """Newest first"""
        filters = {}
        if student_id:
            filters["studentId"] = student_id
        if parent_id:
            filters["parentId"] = parent_id
        if subject:
            filters["subject"] = subject
        if status:
            filters["status"] = status.value

        records = await self.store.query(ASSIGNMENTS_COLLECTION, **filters)

        assignments: List[Assignment] = []
        for record in records:
            try:
                assignments.append(Assignment.from_record(record))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable assignment {record.get('id')}: {e.error_count()} errors")
        return sorted(assignments, key=lambda a: a.created_at, reverse=True)

    async def _write(
        self,
        assignment_id: str,
        fields: Dict,
        expected_version: Optional[int]
    ) -> Assignment:
        try:
            record = await self.store.update(
                ASSIGNMENTS_COLLECTION, assignment_id, fields, expected_version=expected_version
            )
        except DocumentNotFound as e:
            raise AssignmentNotFound(f"Assignment {assignment_id} not found") from e
        return Assignment.from_record(record)

    @staticmethod
    def _check_caller_version(assignment: Assignment, expected_version: Optional[int]):
        if expected_version is not None and assignment.version != expected_version:
            raise VersionConflict(
                f"Assignment {assignment.id} is at version {assignment.version}, expected {expected_version}",
                detail={"current_version": assignment.version}
            )

    @staticmethod
    def ensure_transition(assignment: Assignment, target: AssignmentStatus):
        """Raise InvalidStatusTransition unless assignment may move to target"""
        if not assignment.status.can_move_to(target):
            raise InvalidStatusTransition(
                f"Assignment {assignment.id} cannot move from {assignment.status.value} to {target.value}",
                detail={"status": assignment.status.value}
            )

    async def start_assignment(self, assignment_id: str) -> Assignment:
        """NotStarted -> InProgress; no-op for assignments already underway"""
        assignment = await self.get_assignment(assignment_id)
        self.ensure_transition(assignment, AssignmentStatus.IN_PROGRESS)
        if assignment.status == AssignmentStatus.IN_PROGRESS:
            return assignment

        try:
            return await self._write(
                assignment_id,
                {"status": AssignmentStatus.IN_PROGRESS.value},
                expected_version=assignment.version
            )
        except VersionConflict:
            # Someone else moved it forward first
            return await self.get_assignment(assignment_id)

    async def save_progress(
        self,
        assignment_id: str,
        answers: Dict[str, str],
        expected_version: Optional[int] = None
    ) -> Assignment:
        """Store answers without grading"""
        assignment = await self.get_assignment(assignment_id)
        self._check_caller_version(assignment, expected_version)
        self.ensure_transition(assignment, AssignmentStatus.IN_PROGRESS)

        questions = merge_answers(assignment.questions, answers)
        fields = {"questions": [q.to_record() for q in questions]}
        if assignment.status == AssignmentStatus.NOT_STARTED:
            fields["status"] = AssignmentStatus.IN_PROGRESS.value

        updated = await self._write(assignment_id, fields, expected_version=assignment.version)
        logger.info(f"Saved progress on assignment {assignment_id} (v{updated.version})")
        return updated

    async def submit_answers(
        self,
        assignment_id: str,
        answers: Dict[str, str],
        expected_version: Optional[int] = None
    ) -> Assignment:
        """
        Grade, request a suggestion, and mark Completed.

        The suggestion falls back to a fixed text when the model is
        unavailable; the score is recorded either way.
        """
        assignment = await self.get_assignment(assignment_id)
        self._check_caller_version(assignment, expected_version)
        self.ensure_transition(assignment, AssignmentStatus.COMPLETED)

        questions = merge_answers(assignment.questions, answers)
        grading = grade_questions(questions, weight=self.settings.question_weight)
        suggestion = await self.feedback.request_suggestion(
            assignment.topics, grading.score, grading.questions
        )

        fields = {
            "questions": [q.to_record() for q in grading.questions],
            "status": AssignmentStatus.COMPLETED.value,
            "score": grading.score,
            "aiSuggestion": suggestion.strip(),
            "completedAt": utcnow().isoformat(),
        }
        completed = await self._write(assignment_id, fields, expected_version=assignment.version)
        logger.info(
            f"[GRADE] Assignment {assignment_id} completed: {grading.score}% "
            f"({grading.earned:g}/{grading.possible:g} points)"
        )
        return completed

    async def add_parent_comment(self, assignment_id: str, comment: str) -> Assignment:
        """Comments touch no other field, so the last one written wins"""
        return await self._write(assignment_id, {"parentComment": comment.strip()}, expected_version=None)


class TemplateService:
    """Named criteria a parent can reuse"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def save_template(self, parent_id: str, name: str, criteria: AssignmentCriteria) -> AssignmentTemplate:
        template = AssignmentTemplate(parent_id=parent_id, name=name.strip(), criteria=criteria)
        record = template.model_dump(by_alias=True, mode="json", exclude={"id"})
        template_id = await self.store.create(TEMPLATES_COLLECTION, record)
        logger.info(f"Saved template {template_id} for parent {parent_id}")
        return template.model_copy(update={"id": template_id})

    async def list_templates(self, parent_id: str) -> List[AssignmentTemplate]:
        records = await self.store.query(TEMPLATES_COLLECTION, parentId=parent_id)
        templates = [AssignmentTemplate.model_validate(r) for r in records]
        return sorted(templates, key=lambda t: t.name.lower())
