"""Tests for institutions, classrooms and director changes."""

import copy

import pytest

from services.institution_client import InstitutionClient, get_institution_client
from services.user_client import UserClient, get_user_client

DIRECTOR = {
    "firstName": "Carmen",
    "lastName": "Huamán",
    "documentNumber": "44556677",
    "phone": "912345678",
    "email": "carmen@olivos.edu.pe",
}

INSTITUTION = {
    "institutionInformation": {
        "institutionName": "IE Los Olivos",
        "codeInstitution": "12345678",
        "modularCode": "1234567",
        "institutionType": "PUBLICA",
        "institutionLevel": "INICIAL",
        "gender": "MIXTO",
        "logoUrl": "https://olivos.edu.pe/logo.png",
    },
    "address": {"department": "Lima", "province": "Lima", "district": "San Borja", "street": "Av. Aviación 123"},
    "contactMethods": [{"type": "celular", "value": "987 654 321"}, {"type": "", "value": ""}],
    "gradingType": "ALFABETICO",
    "classroomType": "POR_EDAD",
    "schedules": [{"type": "MAÑANA", "entryTime": "08:00", "exitTime": "12:30"}],
    "classrooms": [{"classroomName": "Patitos", "classroomAge": "3 años", "capacity": 20},
                   {"classroomName": "", "classroomAge": "", "capacity": 0}],
    "director": DIRECTOR,
    "auxiliaries": [{**DIRECTOR, "documentNumber": "11223344", "email": "aux@olivos.edu.pe"}],
}


def _institution(institution_id, name, level="INICIAL", status="ACTIVE"):
    return {"institutionId": institution_id, "status": status,
            "institutionInformation": {"institutionName": name, "codeInstitution": "1234" + institution_id.zfill(4),
                                       "institutionLevel": level, "institutionType": "PUBLICA"},
            "address": None, "classrooms": None}


@pytest.fixture
def institutions(upstream):
    fake = upstream(get_institution_client, InstitutionClient)
    fake.on("GET", "/institutions", {"success": True, "data": [
        _institution("2", "IE San Martín", level="INICIAL_PRIMARIA"),
        _institution("1", "IE Los Olivos"),
    ]})
    return fake


class TestListInstitutions:
    def test_sorted_by_name(self, client, institutions):
        body = client.get("/v1/institutions").json()
        assert [i["institutionId"] for i in body["data"]] == ["1", "2"]

    def test_search_and_level(self, client, institutions):
        body = client.get("/v1/institutions", params={"search": "martín", "level": "INICIAL_PRIMARIA"}).json()
        assert [i["institutionId"] for i in body["data"]] == ["2"]

    def test_inactive_list_uses_its_endpoint(self, client, institutions):
        institutions.on("GET", "/institutions/inactive", {"success": True, "data": []})
        assert client.get("/v1/institutions", params={"status": "inactive"}).json()["meta"]["total"] == 0

    def test_envelope_failure_is_reported(self, client, institutions):
        institutions.on("GET", "/institutions/9", {"success": False, "message": "Institution not found"})
        res = client.get("/v1/institutions/9")
        assert res.status_code == 400
        assert res.json()["error"]["message"] == "Institution not found"


class TestCreateInstitution:
    def test_payload_drops_half_filled_rows_and_fixes_roles(self, client, institutions):
        institutions.on("POST", "/institutions/with-users",
                        {"success": True, "data": _institution("3", "IE Los Olivos")})
        res = client.post("/v1/institutions", json=INSTITUTION)
        assert res.status_code == 201
        sent = institutions.sent_json("POST", "/institutions/with-users")
        assert sent["contactMethods"] == [{"type": "CELULAR", "value": "987654321"}]
        assert len(sent["classrooms"]) == 1
        assert sent["director"]["role"] == "DIRECTOR"
        assert sent["auxiliaries"][0]["role"] == "AUXILIAR"

    def test_director_is_required(self, client, institutions):
        body = {k: v for k, v in INSTITUTION.items() if k != "director"}
        res = client.post("/v1/institutions", json=body)
        assert "director" in res.json()["error"]["fields"]

    def test_schedule_outside_shift(self, client, institutions):
        body = copy.deepcopy(INSTITUTION)
        body["schedules"] = [{"type": "TARDE", "entryTime": "12:00", "exitTime": "17:00"}]
        fields = client.post("/v1/institutions", json=body).json()["error"]["fields"]
        assert fields["schedules.0"] == "TARDE shift runs from 13:00 to 18:00"

    def test_duplicate_shift(self, client, institutions):
        body = copy.deepcopy(INSTITUTION)
        body["schedules"] = [{"type": "MAÑANA", "entryTime": "08:00", "exitTime": "12:00"}] * 2
        fields = client.post("/v1/institutions", json=body).json()["error"]["fields"]
        assert fields["schedules"] == "Each shift can only be configured once"

    def test_codes_and_contacts(self, client, institutions):
        body = copy.deepcopy(INSTITUTION)
        body["institutionInformation"]["modularCode"] = "12AB"
        body["contactMethods"] = [{"type": "", "value": ""}]
        fields = client.post("/v1/institutions", json=body).json()["error"]["fields"]
        assert fields["institutionInformation.modularCode"] == "Modular code must have exactly 7 digits"
        assert fields["contactMethods"] == "At least one contact method is required"

    def test_codes_accept_ascii_digits_only(self, client, institutions):
        body = copy.deepcopy(INSTITUTION)
        body["institutionInformation"]["codeInstitution"] = "１２３４５６７８"
        body["institutionInformation"]["modularCode"] = "123456²"
        fields = client.post("/v1/institutions", json=body).json()["error"]["fields"]
        assert fields["institutionInformation.codeInstitution"] == "Institution code must have exactly 8 digits"
        assert fields["institutionInformation.modularCode"] == "Modular code must have exactly 7 digits"

    @pytest.mark.parametrize("classroom_type", ["POR_EDAD", "POR_GRADO", "MIXTO"])
    def test_classroom_types(self, client, institutions, classroom_type):
        institutions.on("POST", "/institutions/with-users",
                        {"success": True, "data": _institution("3", "IE Los Olivos")})
        res = client.post("/v1/institutions", json={**INSTITUTION, "classroomType": classroom_type})
        assert res.status_code == 201
        assert institutions.sent_json("POST", "/institutions/with-users")["classroomType"] == classroom_type


class TestUpdateInstitution:
    @pytest.fixture
    def body(self):
        body = {k: v for k, v in copy.deepcopy(INSTITUTION).items()
                if k not in ("director", "auxiliaries", "classrooms")}
        body.update(directorId="d1", auxiliaryIds=["a1", "a2"])
        return body

    def test_staff_is_sent_by_id(self, client, institutions, body):
        institutions.on("PUT", "/institutions/1", {"success": True, "data": _institution("1", "IE Los Olivos")})
        res = client.put("/v1/institutions/1", json=body)
        assert res.status_code == 200
        sent = institutions.sent_json("PUT", "/institutions/1")
        assert sent["directorId"] == "d1"
        assert sent["auxiliaryIds"] == ["a1", "a2"]
        assert "director" not in sent
        assert "auxiliaries" not in sent
        assert "classrooms" not in sent
        assert sent["contactMethods"] == [{"type": "CELULAR", "value": "987654321"}]

    def test_director_id_is_required(self, client, institutions, body):
        body["directorId"] = " "
        res = client.put("/v1/institutions/1", json=body)
        assert res.status_code == 422
        assert res.json()["error"]["fields"]["directorId"] == "Director is required"
        assert institutions.requests_to("PUT", "/institutions/1") == []

    def test_accepts_mixto_classroom_type(self, client, institutions, body):
        institutions.on("PUT", "/institutions/1", {"success": True, "data": _institution("1", "IE Los Olivos")})
        body["classroomType"] = "MIXTO"
        assert client.put("/v1/institutions/1", json=body).status_code == 200


class TestInstitutionStatus:
    def test_delete_is_soft(self, client, institutions):
        institutions.on("DELETE", "/institutions/1", {"success": True, "data": None})
        res = client.delete("/v1/institutions/1")
        assert res.status_code == 200
        assert res.json()["data"] == {"institutionId": "1", "status": "INACTIVE"}
        assert len(institutions.requests_to("DELETE", "/institutions/1")) == 1

    def test_restore(self, client, institutions):
        institutions.on("PUT", "/institutions/1/restore",
                        {"success": True, "data": _institution("1", "IE Los Olivos")})
        res = client.put("/v1/institutions/1/restore")
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "ACTIVE"

    def test_rejected_delete_is_reported(self, client, institutions):
        institutions.on("DELETE", "/institutions/1", {"success": False, "message": "Institution has active users"})
        res = client.delete("/v1/institutions/1")
        assert res.status_code == 400
        assert res.json()["error"]["message"] == "Institution has active users"


class TestDirectorChange:
    @pytest.fixture
    def users(self, upstream):
        fake = upstream(get_user_client, UserClient)
        fake.on("GET", "", {"success": True, "data": [
            {"userId": "d1", "firstName": "Rosa", "lastName": "Paz", "role": "DIRECTOR", "status": "ACTIVE"},
            {"userId": "d2", "firstName": "Luis", "lastName": "Paz", "role": "DIRECTOR", "status": "ACTIVE",
             "institutionId": "1"},
            {"userId": "a1", "firstName": "Eva", "lastName": "Sol", "role": "AUXILIAR", "status": "ACTIVE"},
        ]})
        fake.on("GET", "/d1", {"success": True, "data": {"userId": "d1", "role": "DIRECTOR", "status": "ACTIVE"}})
        fake.on("GET", "/d2", {"success": True, "data": {"userId": "d2", "role": "DIRECTOR", "status": "ACTIVE",
                                                         "institutionId": "1"}})
        fake.on("PUT", "/d1", {"success": True, "data": {"userId": "d1", "institutionId": "2"}})
        return fake

    def test_candidates_are_unassigned_directors(self, client, institutions, users):
        data = client.get("/v1/institutions/director-candidates").json()["data"]
        assert [u["userId"] for u in data] == ["d1"]

    def test_change_updates_both_sides(self, client, institutions, users):
        institutions.on("GET", "/institutions/2", {"success": True, "data": _institution("2", "IE San Martín")})
        institutions.on("PUT", "/institutions/2", {"success": True, "data": {
            **_institution("2", "IE San Martín"), "directorId": "d1"}})
        res = client.put("/v1/institutions/2/director", json={"directorId": "d1"})
        assert res.status_code == 200
        assert institutions.sent_json("PUT", "/institutions/2")["directorId"] == "d1"
        assert users.sent_json("PUT", "/d1") == {"institutionId": "2"}

    def test_change_keeps_expanded_staff(self, client, institutions, users):
        detail = {
            **_institution("2", "IE San Martín"),
            "address": INSTITUTION["address"],
            "contactMethods": [{"type": "CELULAR", "value": "987654321"}],
            "schedules": INSTITUTION["schedules"],
            "director": {"userId": "d0", "role": "DIRECTOR"},
            "auxiliaries": [{"userId": "a1", "role": "AUXILIAR"}, {"userId": "a2", "role": "AUXILIAR"}],
            "classrooms": [{"classroomId": "c1", "classroomName": "Patitos"}],
            "createdAt": "2025-03-01T08:00:00",
        }
        institutions.on("GET", "/institutions/2", {"success": True, "data": detail})
        institutions.on("PUT", "/institutions/2", {"success": True, "data": {**detail, "directorId": "d1"}})

        assert client.put("/v1/institutions/2/director", json={"directorId": "d1"}).status_code == 200
        sent = institutions.sent_json("PUT", "/institutions/2")
        assert sent["directorId"] == "d1"
        assert sent["auxiliaryIds"] == ["a1", "a2"]
        assert sent["address"]["street"] == "Av. Aviación 123"
        assert sent["schedules"] == INSTITUTION["schedules"]
        for read_only in ("director", "auxiliaries", "classrooms", "classroomIds", "status", "createdAt"):
            assert read_only not in sent

    def test_assigned_director_rejected(self, client, institutions, users):
        res = client.put("/v1/institutions/2/director", json={"directorId": "d2"})
        assert res.status_code == 422
        assert institutions.requests_to("PUT", "/institutions/2") == []


class TestClassrooms:
    def test_create_under_institution(self, client, institutions):
        institutions.on("POST", "/classrooms", {"success": True, "data": {"classroomId": "c1", "classroomName": "Patitos"}})
        res = client.post("/v1/institutions/1/classrooms",
                          json={"classroomName": "Patitos", "classroomAge": "3 años", "capacity": 20})
        assert res.status_code == 201
        assert institutions.sent_json("POST", "/classrooms")["institutionId"] == "1"

    def test_capacity_must_be_positive(self, client, institutions):
        res = client.put("/v1/classrooms/c1", json={"classroomName": "Patitos", "classroomAge": "3 años", "capacity": 0})
        assert res.status_code == 422

    def test_restore(self, client, institutions):
        institutions.on("PATCH", "/classrooms/c1/restore", {"success": True, "data": {"classroomId": "c1", "status": "ACTIVE"}})
        assert client.patch("/v1/classrooms/c1/restore").json()["data"]["status"] == "ACTIVE"
