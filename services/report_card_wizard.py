"""
services/report_card_wizard.py

Four-step report-card wizard over a stored draft:
  1) environment (institution + classroom)
  2) student
  3) items: course + competency + achievement level, no duplicate pair
  4) details, validated on submit
Moving forward validates the current step; moving back never does.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models.grade_drafts import ReportCardDraft
from schemas.grades import DetailsStep, ReportCardDraftOut, ReportItemIn, WIZARD_STEPS
from services.forms import ACADEMIC_RANGE, PLAIN_LETTERS, ErrorCollector, FormValidationError, blank, first_of_month

logger = logging.getLogger(__name__)

FIRST_STEP = 1
LAST_STEP = 4


class DraftNotFound(Exception):
    pass


# ==========================================================
# [store]
# ==========================================================

def create_draft(db: Session, **environment) -> ReportCardDraft:
    draft = ReportCardDraft(id=str(uuid.uuid4()), step=FIRST_STEP, items=[], **environment)
    db.add(draft)
    db.commit()
    db.refresh(draft)
    logger.info(f"report card draft {draft.id} created")
    return draft


def get_draft(db: Session, draft_id: str) -> ReportCardDraft:
    draft = db.query(ReportCardDraft).filter(ReportCardDraft.id == draft_id).first()
    if draft is None:
        raise DraftNotFound(draft_id)
    return draft


def save(db: Session, draft: ReportCardDraft) -> ReportCardDraft:
    db.commit()
    db.refresh(draft)
    return draft


def discard(db: Session, draft: ReportCardDraft):
    db.delete(draft)
    db.commit()


def to_out(draft: ReportCardDraft) -> Dict[str, Any]:
    return ReportCardDraftOut(
        id=draft.id,
        step=draft.step,
        step_name=WIZARD_STEPS[draft.step],
        institution_id=draft.institution_id,
        institution_name=draft.institution_name,
        classroom_id=draft.classroom_id,
        classroom_name=draft.classroom_name,
        student_id=draft.student_id,
        student_name=draft.student_name,
        enrollment_id=draft.enrollment_id,
        items=list(draft.items or []),
        academic_year=draft.academic_year,
        evaluated_by=draft.evaluated_by,
        evaluation_date=draft.evaluation_date,
        description=draft.description,
        observations=draft.observations,
        activity_context=draft.activity_context,
        evidence_url=draft.evidence_url,
    ).to_upstream()


# ==========================================================
# [items]
# ==========================================================

def add_item(draft: ReportCardDraft, item: ReportItemIn):
    errors = ErrorCollector()
    errors.check(not blank(item.course_id), "courseId", "Select a course")
    errors.check(not blank(item.competency_id), "competencyId", "Select a competency")
    errors.check(item.achievement_level is not None, "achievementLevel", "Select an achievement level")
    errors.raise_if_any()

    items: List[Dict[str, Any]] = list(draft.items or [])
    if any(i["courseId"] == item.course_id and i["competencyId"] == item.competency_id for i in items):
        raise FormValidationError({"competencyId": "This competency is already graded for the course"})
    items.append(item.to_upstream())
    # JSON columns are only flagged dirty on reassignment
    draft.items = items


def remove_item(draft: ReportCardDraft, course_id: str, competency_id: str) -> bool:
    items = list(draft.items or [])
    kept = [i for i in items if not (i["courseId"] == course_id and i["competencyId"] == competency_id)]
    draft.items = kept
    return len(kept) != len(items)


# ==========================================================
# [steps]
# ==========================================================

def step_errors(draft: ReportCardDraft, step: int, today: Optional[date] = None) -> Dict[str, str]:
    errors = ErrorCollector()
    if step == 1:
        errors.check(not blank(draft.institution_id), "institutionId", "Select an institution")
        errors.check(not blank(draft.classroom_id), "classroomId", "Select a classroom")
    elif step == 2:
        errors.check(not blank(draft.student_id), "studentId", "Select a student")
    elif step == 3:
        errors.check(bool(draft.items), "items", "Add at least one competency grade")
    elif step == 4:
        _details_errors(draft, errors, today)
    return errors.errors


def _details_errors(draft: ReportCardDraft, errors: ErrorCollector, today: Optional[date]):
    if blank(draft.academic_year) or not ACADEMIC_RANGE.match(draft.academic_year):
        errors.add("academicYear", "Academic year must look like 2025-2026")
    errors.check(not blank(draft.evaluated_by), "evaluatedBy", "Evaluator is required")

    if blank(draft.evaluation_date):
        errors.add("evaluationDate", "Evaluation date is required")
    elif date.fromisoformat(draft.evaluation_date) < first_of_month(today):
        errors.add("evaluationDate", "Evaluation date cannot be before the current month")

    for attr, field, label in (
        ("description", "description", "Description"),
        ("observations", "observations", "Observations"),
        ("activity_context", "activityContext", "Activity context"),
    ):
        value = getattr(draft, attr)
        if blank(value):
            errors.add(field, f"{label} is required")
        elif not PLAIN_LETTERS.match(value):
            errors.add(field, f"{label} may only contain letters and spaces")


def advance(draft: ReportCardDraft):
    errors = step_errors(draft, draft.step)
    if errors:
        raise FormValidationError(errors)
    draft.step = min(LAST_STEP, draft.step + 1)


def go_back(draft: ReportCardDraft):
    draft.step = max(FIRST_STEP, draft.step - 1)


def apply_details(draft: ReportCardDraft, details: DetailsStep):
    for field in details.model_fields_set:
        value = getattr(details, field)
        if field == "evaluation_date" and value is not None:
            value = value.isoformat()
        setattr(draft, field, value)


# ==========================================================
# [submit]
# ==========================================================

def validate_for_submit(draft: ReportCardDraft, today: Optional[date] = None):
    errors: Dict[str, str] = {}
    for step in range(FIRST_STEP, LAST_STEP + 1):
        for field, message in step_errors(draft, step, today).items():
            errors.setdefault(field, message)
    if errors:
        raise FormValidationError(errors)


def evaluation_payloads(draft: ReportCardDraft) -> List[Dict[str, Any]]:
    """One evaluation per graded competency; the year sent upstream is the first of the range"""
    year = int(draft.academic_year.split("-")[0])
    evidence = [draft.evidence_url] if draft.evidence_url else []
    return [
        {
            "studentId": draft.student_id,
            "enrollmentId": draft.enrollment_id,
            "courseId": item["courseId"],
            "competencyId": item["competencyId"],
            "achievementLevel": item["achievementLevel"],
            "classroomId": draft.classroom_id,
            "institutionId": draft.institution_id,
            "academicYear": year,
            "description": draft.description,
            "evaluatedBy": draft.evaluated_by,
            "evaluationDate": draft.evaluation_date,
            "observations": draft.observations,
            "activityContext": draft.activity_context,
            "evidenceUrls": evidence,
        }
        for item in draft.items
    ]
