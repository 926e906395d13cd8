from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from schemas.common import ok
from schemas.grades import (
    AchievementLevel, DetailsStep, DraftCreate, EnvironmentStep, EvaluationIn, ReportItemIn, StudentStep,
)
from services import report_card_wizard as wizard
from services.grade_client import GradeClient, get_grade_client
from services.listing import count_where, equals, list_response, matches_any, sort_by
from services.pdf_service import PDFService, get_pdf_service
from services.upstream import gather, run_blocking

router = APIRouter(prefix="/grades", tags=["Grades"])


def _load(db: Session, draft_id: str):
    try:
        return wizard.get_draft(db, draft_id)
    except wizard.DraftNotFound:
        raise HTTPException(status_code=404, detail="Report card draft not found")


# ==========================================================
# [evaluations] list / detail / create
# ==========================================================
@router.get("/evaluations")
def list_evaluations(
    search: Optional[str] = None,
    student_id: Optional[str] = Query(default=None, alias="studentId"),
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    achievement_level: Optional[AchievementLevel] = Query(default=None, alias="achievementLevel"),
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(default=None, ge=1, le=settings.MAX_PAGE_SIZE),
    client: GradeClient = Depends(get_grade_client),
):
    evaluations = client.list_evaluations()
    stats = {
        "total": len(evaluations),
        "A": count_where(evaluations, lambda e: e.achievement_level == "A"),
        "B": count_where(evaluations, lambda e: e.achievement_level == "B"),
        "C": count_where(evaluations, lambda e: e.achievement_level == "C"),
    }
    filtered = [
        e for e in evaluations
        if matches_any(e, search, ("student_id", "course_id", "competency_id"))
        and equals(e.student_id, student_id)
        and equals(e.course_id, course_id)
        and equals(e.achievement_level, achievement_level.value if achievement_level else None)
    ]
    filtered = sort_by(filtered, "evaluation_date", descending=True)
    return list_response(filtered, page, size or settings.DEFAULT_PAGE_SIZE,
                         sort="evaluationDate,desc", stats=stats)


@router.get("/evaluations/{evaluation_id}")
def get_evaluation(evaluation_id: str, client: GradeClient = Depends(get_grade_client)):
    return ok(client.get_evaluation(evaluation_id).to_upstream())


@router.post("/evaluations", status_code=201)
def create_evaluation(data: EvaluationIn, client: GradeClient = Depends(get_grade_client)):
    return ok(client.create_evaluation(data.to_upstream()).to_upstream(), "Evaluation registered")


# ==========================================================
# [catalog] courses / competencies for the item step
# ==========================================================
@router.get("/courses")
def list_courses(client: GradeClient = Depends(get_grade_client)):
    return ok([c.to_upstream() for c in client.courses()])


@router.get("/courses/{course_id}/competencies")
def list_competencies(course_id: str, client: GradeClient = Depends(get_grade_client)):
    return ok([c.to_upstream() for c in client.competencies(course_id)])


# ==========================================================
# [wizard] report-card drafts
# ==========================================================
@router.post("/report-cards", status_code=201)
def create_report_card(data: DraftCreate, db: Session = Depends(get_db)):
    draft = wizard.create_draft(db, **data.model_dump())
    return ok(wizard.to_out(draft), "Draft created")


@router.get("/report-cards/{draft_id}")
def get_report_card(draft_id: str, db: Session = Depends(get_db)):
    return ok(wizard.to_out(_load(db, draft_id)))


@router.delete("/report-cards/{draft_id}")
def discard_report_card(draft_id: str, db: Session = Depends(get_db)):
    wizard.discard(db, _load(db, draft_id))
    return ok({"id": draft_id}, "Draft discarded")


@router.put("/report-cards/{draft_id}/environment")
def set_environment(draft_id: str, data: EnvironmentStep, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    for field, value in data.model_dump().items():
        setattr(draft, field, value)
    return ok(wizard.to_out(wizard.save(db, draft)))


@router.put("/report-cards/{draft_id}/student")
def set_student(draft_id: str, data: StudentStep, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    for field, value in data.model_dump().items():
        setattr(draft, field, value)
    return ok(wizard.to_out(wizard.save(db, draft)))


@router.post("/report-cards/{draft_id}/items", status_code=201)
def add_report_item(draft_id: str, data: ReportItemIn, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    wizard.add_item(draft, data)
    return ok(wizard.to_out(wizard.save(db, draft)), "Grade added")


@router.delete("/report-cards/{draft_id}/items/{course_id}/{competency_id}")
def remove_report_item(draft_id: str, course_id: str, competency_id: str, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    if not wizard.remove_item(draft, course_id, competency_id):
        raise HTTPException(status_code=404, detail="Grade not found in draft")
    return ok(wizard.to_out(wizard.save(db, draft)), "Grade removed")


@router.put("/report-cards/{draft_id}/details")
def set_details(draft_id: str, data: DetailsStep, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    wizard.apply_details(draft, data)
    return ok(wizard.to_out(wizard.save(db, draft)))


@router.post("/report-cards/{draft_id}/next")
def next_step(draft_id: str, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    wizard.advance(draft)
    return ok(wizard.to_out(wizard.save(db, draft)))


@router.post("/report-cards/{draft_id}/previous")
def previous_step(draft_id: str, db: Session = Depends(get_db)):
    draft = _load(db, draft_id)
    wizard.go_back(draft)
    return ok(wizard.to_out(wizard.save(db, draft)))


@router.post("/report-cards/{draft_id}/submit", status_code=201)
async def submit_report_card(draft_id: str, db: Session = Depends(get_db),
                             client: GradeClient = Depends(get_grade_client)):
    # session work stays off the event loop
    draft = await run_blocking(_load, db, draft_id)
    wizard.validate_for_submit(draft)

    payloads = wizard.evaluation_payloads(draft)
    # one request per competency, all in flight together
    created = await gather(*[lambda p=p: client.create_evaluation(p) for p in payloads])

    await run_blocking(wizard.discard, db, draft)
    return ok([e.to_upstream() for e in created], f"{len(created)} evaluation(s) registered")


@router.get("/report-cards/{draft_id}/pdf")
def report_card_pdf(draft_id: str, db: Session = Depends(get_db),
                    pdf: PDFService = Depends(get_pdf_service)):
    draft = wizard.to_out(_load(db, draft_id))
    content = pdf.generate_report_card_pdf(draft)
    filename = f"boleta_{draft.get('studentId') or draft_id}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
