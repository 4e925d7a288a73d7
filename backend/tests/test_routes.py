"""
School API Backend — HTTP Endpoint Tests
==========================================

What:  End-to-end requests through middleware, routing, validation,
       dispatch and envelope rendering.

What we test:
    ✅ The envelope status code is the HTTP status
    ✅ Validation failures → 400 listing every message
    ✅ Unreadable bodies and wrongly typed fields → 400 envelopes
    ✅ Role routes: 401 without a token, 403 without Admin
    ✅ Culture negotiation for messages and names
    ✅ Framework errors and crashes still answer with an envelope
    ✅ Health endpoint
"""

import pytest

from school_api.services.token_service import token_service


async def _create_department(client, name_en="Science"):
    manager = await client.post("/api/instructors", json={"nameAr": "مدير", "nameEn": f"Head of {name_en}"})
    response = await client.post(
        "/api/departments",
        json={"nameAr": f"قسم {name_en}", "nameEn": name_en, "managerId": manager.json()["data"]["id"]},
    )
    return response.json()["data"]


class TestStudentEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client):
        department = await _create_department(test_client)

        response = await test_client.post(
            "/api/students",
            json={"nameAr": "أحمد", "nameEn": "Ahmed", "address": "Cairo", "departmentId": department["id"]},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["succeeded"] is True
        assert body["statusCode"] == 201
        fetched = await test_client.get(f"/api/students/{body['data']['id']}")
        assert fetched.json()["data"]["departmentName"] == "Science"

    @pytest.mark.asyncio
    async def test_form_body_is_accepted(self, test_client):
        response = await test_client.post("/api/students", data={"nameAr": "منى", "nameEn": "Mona"})
        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Mona"

    @pytest.mark.asyncio
    async def test_validation_errors_are_listed(self, test_client):
        response = await test_client.post("/api/students", json={"address": "Cairo"})

        assert response.status_code == 400
        body = response.json()
        assert body["succeeded"] is False
        assert body["data"] is None
        assert body["errors"] == ["nameAr is required", "nameEn is required"]

    @pytest.mark.asyncio
    async def test_unreadable_json(self, test_client):
        response = await test_client.post(
            "/api/students", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "The request body could not be read"

    @pytest.mark.asyncio
    async def test_wrongly_typed_field(self, test_client):
        response = await test_client.post(
            "/api/students", json={"nameAr": "أ", "nameEn": "A", "departmentId": "first"}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0].startswith("departmentId")

    @pytest.mark.asyncio
    async def test_delete_twice(self, test_client):
        created = await test_client.post("/api/students", json={"nameAr": "عمر", "nameEn": "Omar"})
        student_id = created.json()["data"]["id"]

        first = await test_client.delete(f"/api/students/{student_id}")
        second = await test_client.delete(f"/api/students/{student_id}")

        assert first.status_code == 200
        assert second.status_code == 404
        assert second.json()["message"] == "Student not found"

    @pytest.mark.asyncio
    async def test_paginated_query_parameters(self, test_client):
        for name in ("Ziad", "Adam", "Laila"):
            await test_client.post("/api/students", json={"nameAr": f"ع {name}", "nameEn": name})

        response = await test_client.get(
            "/api/students/paginated", params={"pageNumber": 1, "pageSize": 2, "orderBy": "name"}
        )

        page = response.json()["data"]
        assert [item["name"] for item in page["items"]] == ["Adam", "Laila"]
        assert page["totalCount"] == 3
        assert page["hasNextPage"] is True

    @pytest.mark.asyncio
    async def test_invalid_order_by(self, test_client):
        response = await test_client.get("/api/students/paginated", params={"orderBy": "shoeSize"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_huge_page_number_is_400(self, test_client):
        response = await test_client.get(
            "/api/students/paginated", params={"pageNumber": "10000000000000000000"}
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["pageNumber must be between 1 and 1000000"]

    @pytest.mark.asyncio
    async def test_enroll_and_grade(self, test_client):
        student = (await test_client.post("/api/students", json={"nameAr": "هدى", "nameEn": "Hoda"})).json()["data"]
        subject = (await test_client.post("/api/subjects", json={"nameAr": "فن", "nameEn": "Art", "period": 8})).json()["data"]

        enrolled = await test_client.post(f"/api/students/{student['id']}/subjects", json={"subjectId": subject["id"]})
        graded = await test_client.put(
            f"/api/students/{student['id']}/subjects/{subject['id']}", json={"grade": 77}
        )

        assert enrolled.status_code == 201
        assert graded.status_code == 200
        assert graded.json()["data"]["subjects"] == [{"subjectId": subject["id"], "name": "Art", "grade": 77}]


class TestDepartmentEndpoints:

    @pytest.mark.asyncio
    async def test_delete_with_subject_is_rejected(self, test_client):
        department = await _create_department(test_client, "Physics")
        subject = (await test_client.post("/api/subjects", json={"nameAr": "بصريات", "nameEn": "Optics"})).json()["data"]
        assigned = await test_client.post(f"/api/departments/{department['id']}/subjects/{subject['id']}")

        response = await test_client.delete(f"/api/departments/{department['id']}")

        assert assigned.status_code == 201
        assert response.status_code == 400
        still_there = await test_client.get(f"/api/departments/{department['id']}")
        assert still_there.status_code == 200
        assert [item["name"] for item in still_there.json()["data"]["subjects"]] == ["Optics"]

    @pytest.mark.asyncio
    async def test_student_page_parameters(self, test_client):
        department = await _create_department(test_client, "History")
        for n in range(3):
            await test_client.post(
                "/api/students", json={"nameAr": f"ط {n}", "nameEn": f"Student {n}", "departmentId": department["id"]}
            )

        response = await test_client.get(
            f"/api/departments/{department['id']}", params={"studentPageNumber": 2, "studentPageSize": 2}
        )

        students = response.json()["data"]["students"]
        assert students["totalCount"] == 3
        assert [item["name"] for item in students["items"]] == ["Student 2"]

    @pytest.mark.asyncio
    async def test_huge_student_page_number_is_400(self, test_client):
        department = await _create_department(test_client, "Geology")
        response = await test_client.get(
            f"/api/departments/{department['id']}", params={"studentPageNumber": "10000000000000000000"}
        )
        assert response.status_code == 400
        assert response.json()["succeeded"] is False


class TestAuthorizationEndpoints:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.post("/api/authorization", json={"roleName": "Teacher"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["succeeded"] is False

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, test_client):
        response = await test_client.get("/api/authorization", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_is_403(self, test_client, user_headers):
        response = await test_client.post("/api/authorization", json={"roleName": "Teacher"}, headers=user_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_manages_roles(self, test_client, admin_headers):
        added = await test_client.post("/api/authorization", json={"roleName": "Teacher"}, headers=admin_headers)
        listed = await test_client.get("/api/authorization", headers=admin_headers)
        missing = await test_client.put("/api/authorization", json={"id": 99, "name": "Admin"}, headers=admin_headers)

        assert added.status_code == 201
        assert [role["name"] for role in listed.json()["data"]] == ["Admin", "Teacher", "User"]
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_role_name_is_400(self, test_client, admin_headers):
        response = await test_client.post("/api/authorization", json={"roleName": "  "}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["errors"] == ["roleName is required"]


class TestAccountEndpoints:

    @pytest.mark.asyncio
    async def test_register_sign_in_and_edit_self(self, test_client):
        registered = await test_client.post(
            "/api/users",
            json={
                "userName": "mona",
                "email": "mona@school.test",
                "password": "Secret1!",
                "confirmPassword": "Secret1!",
            },
        )
        assert registered.status_code == 201

        signed_in = await test_client.post(
            "/api/authentication/sign-in", json={"userName": "mona", "password": "Secret1!"}
        )
        token = signed_in.json()["data"]["accessToken"]
        user_id = token_service.decode(token).id
        headers = {"Authorization": f"Bearer {token}"}

        own = await test_client.put(
            "/api/users", json={"id": user_id, "userName": "mona", "email": "mona@school.test", "country": "Egypt"},
            headers=headers,
        )
        other = await test_client.put(
            "/api/users", json={"id": user_id + 1, "userName": "x", "email": "x@school.test"}, headers=headers
        )

        assert signed_in.status_code == 200
        assert own.status_code == 200
        assert own.json()["data"]["country"] == "Egypt"
        assert other.status_code == 403

    @pytest.mark.asyncio
    async def test_user_list_requires_token(self, test_client, user_headers):
        anonymous = await test_client.get("/api/users")
        authenticated = await test_client.get("/api/users", headers=user_headers)
        assert anonymous.status_code == 401
        assert authenticated.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_user_requires_admin(self, test_client, user_headers):
        response = await test_client.delete("/api/users/1", headers=user_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_bad_credentials(self, test_client):
        response = await test_client.post(
            "/api/authentication/sign-in", json={"userName": "ghost", "password": "Secret1!"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "User name or password is incorrect"


class TestCulture:

    @pytest.mark.asyncio
    async def test_query_culture_localizes_messages_and_names(self, test_client):
        created = await test_client.post("/api/subjects", json={"nameAr": "رياضيات", "nameEn": "Math"})
        subject_id = created.json()["data"]["id"]

        response = await test_client.get(f"/api/subjects/{subject_id}", params={"culture": "ar-EG"})

        assert response.headers["Content-Language"] == "ar-EG"
        body = response.json()
        assert body["data"]["name"] == "رياضيات"
        assert body["message"] == "تمت العملية بنجاح"

    @pytest.mark.asyncio
    async def test_accept_language_localizes_validation(self, test_client):
        response = await test_client.post(
            "/api/subjects", json={"nameEn": "Math"}, headers={"Accept-Language": "fr-FR,fr;q=0.9"}
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["nameAr est obligatoire"]


class TestFrameworkErrors:

    @pytest.mark.asyncio
    async def test_unknown_route_is_an_envelope(self, test_client):
        response = await test_client.get("/api/classrooms")
        assert response.status_code == 404
        assert response.json() == {
            "statusCode": 404,
            "succeeded": False,
            "message": "Not found",
            "data": None,
            "errors": ["Not found"],
        }

    @pytest.mark.asyncio
    async def test_wrong_method_is_an_envelope(self, test_client):
        response = await test_client.patch("/api/students", json={}, params={"culture": "ar-EG"})
        assert response.status_code == 405
        assert "Allow" in response.headers
        body = response.json()
        assert body["statusCode"] == 405
        assert body["succeeded"] is False
        assert body["message"] == "هذه الطريقة غير مسموحة على هذا المورد"

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_request_culture(self):
        from fastapi import FastAPI
        from httpx import ASGITransport, AsyncClient

        from school_api.main import register_exception_handlers
        from school_api.middleware.locale import LocaleMiddleware

        app = FastAPI()
        app.add_middleware(LocaleMiddleware)
        register_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/boom", params={"culture": "fr-FR"})

        assert response.status_code == 500
        assert response.json()["message"] == "Une erreur inattendue s'est produite. Veuillez réessayer plus tard."


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_check(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert "uptimeSeconds" in body
        assert "X-Request-ID" in response.headers
