from typing import Any, Dict, List

from config.settings import settings
from schemas.grades import CompetencyOption, CourseOption, Evaluation
from services.upstream import UpstreamClient


class GradeClient(UpstreamClient):
    """Evaluation service plus the course / competency catalog it grades against"""

    service = "grades"

    def list_evaluations(self) -> List[Evaluation]:
        return [Evaluation.model_validate(e) for e in self.unwrap_list(self.get("/evaluations"))]

    def get_evaluation(self, evaluation_id: str) -> Evaluation:
        return Evaluation.model_validate(self.unwrap(self.get(f"/evaluations/{evaluation_id}")) or {})

    def create_evaluation(self, payload: Dict[str, Any]) -> Evaluation:
        return Evaluation.model_validate(self.unwrap(self.post("/evaluations", json=payload)) or {})

    def courses(self) -> List[CourseOption]:
        return [CourseOption.model_validate(c) for c in self.unwrap_list(self.get("/courses"))]

    def competencies(self, course_id: str) -> List[CompetencyOption]:
        payload = self.get(f"/courses/{course_id}/competencies")
        return [CompetencyOption.model_validate(c) for c in self.unwrap_list(payload)]


grade_client = GradeClient(settings.GRADE_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_grade_client() -> GradeClient:
    return grade_client
