"""Tests for the academic catalog endpoints."""

import pytest

from config.settings import settings
from services.academic_client import AcademicClient, get_academic_client


def _entry(course_id, code, name, status="ACTIVE", area="Matemática", age="4 años"):
    return {
        "institutionId": "inst-1",
        "course": {"id": course_id, "code": code, "name": name, "status": status,
                   "areaCurricular": area, "ageLevel": age},
        "competency": {"id": f"comp-{course_id}", "code": "C-1", "name": "Resuelve problemas"},
        "capacity": {"id": f"cap-{course_id}", "code": "CP-1", "name": "Traduce cantidades"},
        "performance": {"id": f"perf-{course_id}", "code": "P-1", "ageLevel": "Fácil"},
    }


def _registration(**course):
    base = {
        "code": "MAT-01",
        "name": "Matemática",
        "areaCurricular": "Matemática",
        "ageLevel": "4 años",
        "description": "Nociones de cantidad y forma para niños",
    }
    base.update(course)
    return {
        "course": base,
        "competency": {"code": "C-01", "name": "Resuelve problemas", "description": "Resuelve problemas de cantidad",
                       "orderIndex": 1},
        "capacity": {"code": "CP-01", "name": "Traduce cantidades", "description": "Traduce cantidades a expresiones",
                     "orderIndex": 1},
        "performance": {"code": "P-01", "description": "Cuenta objetos hasta diez sin ayuda",
                        "ageLevel": "Fácil", "orderIndex": 1},
    }


@pytest.fixture
def academic(upstream):
    fake = upstream(get_academic_client, AcademicClient)
    fake.on("GET", "/list-all", {"success": True, "data": [
        _entry("1", "MAT-01", "Matemática"),
        _entry("2", "COM-01", "Comunicación", area="Comunicación", age="5 años"),
        _entry("3", "ART-01", "Arte", status="INACTIVE", area="Arte"),
    ]})
    return fake


class TestListCatalog:
    def test_stats_cover_all_entries(self, client, academic):
        """stats are computed before filtering"""
        res = client.get("/v1/academic", params={"status": "active"})
        assert res.status_code == 200
        body = res.json()
        assert body["stats"] == {"total": 3, "active": 2, "inactive": 1}
        assert [e["course"]["code"] for e in body["data"]] == ["COM-01", "MAT-01"]

    def test_search_matches_code_or_name(self, client, academic):
        res = client.get("/v1/academic", params={"search": "arte"})
        assert [e["course"]["id"] for e in res.json()["data"]] == ["3"]

    def test_area_filter_and_options(self, client, academic):
        body = client.get("/v1/academic", params={"area": "Comunicación"}).json()
        assert body["meta"]["total"] == 1
        assert body["filters"]["areas"] == ["Arte", "Comunicación", "Matemática"]

    def test_detail_not_found(self, client, academic):
        res = client.get("/v1/academic/99")
        assert res.status_code == 404
        assert res.json()["success"] is False


class TestRegisterCatalog:
    def test_register_sends_new_active_course(self, client, academic):
        academic.on("POST", "/register-all", {"success": True, "data": {"courseId": "10"}}, status=201)
        res = client.post("/v1/academic", json=_registration())
        assert res.status_code == 201
        sent = academic.sent_json("POST", "/register-all")
        assert sent["course"]["active"] is True
        assert "id" not in sent["course"]
        assert sent["institutionId"]

    def test_invalid_code_is_rejected_before_upstream(self, client, academic):
        res = client.post("/v1/academic", json=_registration(code="mat 01"))
        assert res.status_code == 422
        assert "course.code" in res.json()["error"]["fields"]
        assert academic.requests_to("POST", "/register-all") == []

    def test_placeholder_area_and_short_description(self, client, academic):
        res = client.post("/v1/academic", json=_registration(areaCurricular="Seleccionar...", description="corta"))
        fields = res.json()["error"]["fields"]
        assert fields["course.areaCurricular"] == "Curricular area is required"
        assert "course.description" in fields

    def test_upstream_conflict_passes_through(self, client, academic):
        academic.on("POST", "/register-all", {"message": "Code already exists"}, status=409)
        res = client.post("/v1/academic", json=_registration())
        assert res.status_code == 409
        assert res.json()["error"]["message"] == "Code already exists"


class TestCourseStatus:
    def test_deactivate_and_activate(self, client, academic):
        academic.on("PUT", "/deactivate/1", None).on("PUT", "/activate/1", None)
        assert client.patch("/v1/academic/1/deactivate").json()["data"] == {"id": "1", "active": False}
        assert client.patch("/v1/academic/1/activate").json()["data"] == {"id": "1", "active": True}


class TestUpdateCatalog:
    def test_path_id_goes_into_course(self, client, academic):
        academic.on("PUT", "/update-all", {"success": True, "data": {"courseId": "1"}})
        res = client.put("/v1/academic/1", json=_registration(name="Matemática Inicial"))
        assert res.status_code == 200
        sent = academic.sent_json("PUT", "/update-all")
        assert sent["course"]["id"] == "1"
        assert sent["course"]["name"] == "Matemática Inicial"
        assert sent["institutionId"] == settings.DEFAULT_INSTITUTION_ID

    def test_explicit_institution_is_kept(self, client, academic):
        academic.on("PUT", "/update-all", {"success": True, "data": {"courseId": "1"}})
        client.put("/v1/academic/1", json={**_registration(), "institutionId": "inst-9"})
        assert academic.sent_json("PUT", "/update-all")["institutionId"] == "inst-9"

    def test_update_validates_like_register(self, client, academic):
        res = client.put("/v1/academic/1", json=_registration(code="mat 01"))
        assert res.status_code == 422
        assert academic.requests_to("PUT", "/update-all") == []
