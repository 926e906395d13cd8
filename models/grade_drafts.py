from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from database.db import Base


class ReportCardDraft(Base):
    __tablename__ = "report_card_drafts"  # grade wizard in progress, removed on submit

    id = Column(String(36), primary_key=True, index=True)     # uuid4
    step = Column(Integer, nullable=False, default=1)          # 1 environment, 2 student, 3 items, 4 details

    # step 1: environment
    institution_id = Column(String(64))
    institution_name = Column(String(200))
    classroom_id = Column(String(64))
    classroom_name = Column(String(200))

    # step 2: student
    student_id = Column(String(64))
    student_name = Column(String(200))
    enrollment_id = Column(String(64))

    # step 3: [{courseId, courseName, competencyId, competencyName, achievementLevel}]
    items = Column(JSON, nullable=False, default=list)

    # step 4: details
    academic_year = Column(String(9))                          # "2025-2026"
    evaluated_by = Column(String(100))
    evaluation_date = Column(String(10))                       # YYYY-MM-DD
    description = Column(Text)
    observations = Column(Text)
    activity_context = Column(Text)
    evidence_url = Column(String(500))

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
