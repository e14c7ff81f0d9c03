"""
HTTP-level tests for the users resource
Each test starts from the 20-user seed snapshot.
"""

from datetime import date

import pytest

from tests.users_api.helpers import SEED, SEED_SIZE, new_user, sub_error_fields, total_elements
from utils.messages import get_message


class TestListUsers:
    """GET /api/users"""

    @pytest.mark.asyncio
    async def test_returns_seeded_collection_size(self, api_client):
        response = await api_client.get("/api/users")

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == {"size": 20, "totalElements": SEED_SIZE, "totalPages": 1, "number": 0}
        assert len(body["_embedded"]["users"]) == SEED_SIZE

    @pytest.mark.asyncio
    async def test_unsorted_collection_is_ordered_by_id(self, api_client):
        response = await api_client.get("/api/users")

        ids = [user["id"] for user in response.json()["_embedded"]["users"]]
        assert ids == list(range(1, SEED_SIZE + 1))

    @pytest.mark.asyncio
    async def test_users_carry_self_links(self, api_client):
        response = await api_client.get("/api/users")

        first = response.json()["_embedded"]["users"][0]
        assert first["_links"]["self"]["href"] == "http://testserver/api/users/1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("direction,pick", [("asc", min), ("desc", max)])
    async def test_sort_by_first_name_puts_extreme_first(self, api_client, direction, pick):
        response = await api_client.get("/api/users", params={"sort": f"firstName,{direction}"})

        assert response.status_code == 200
        users = response.json()["_embedded"]["users"]
        assert users[0]["firstName"] == pick(user["firstName"] for user in SEED)

    @pytest.mark.asyncio
    async def test_sort_direction_defaults_to_ascending(self, api_client):
        response = await api_client.get("/api/users", params={"sort": "email"})

        emails = [user["email"] for user in response.json()["_embedded"]["users"]]
        assert emails == sorted(emails)

    @pytest.mark.asyncio
    async def test_multiple_sort_parameters_apply_in_order(self, api_client, user_store):
        await user_store.insert({
            "firstName": "Anna", "lastName": "Aaronova",
            "dayOfBirth": date(2001, 1, 1), "email": "anna2@example.com"
        })

        response = await api_client.get(
            "/api/users", params=[("sort", "firstName,asc"), ("sort", "lastName,desc")]
        )

        annas = [user["lastName"] for user in response.json()["_embedded"]["users"] if user["firstName"] == "Anna"]
        assert annas == ["Sokolova", "Aaronova"]

    @pytest.mark.asyncio
    async def test_pagination_metadata_and_links(self, api_client):
        response = await api_client.get("/api/users", params={"page": 1, "size": 5})

        body = response.json()
        assert body["page"] == {"size": 5, "totalElements": SEED_SIZE, "totalPages": 4, "number": 1}
        assert [user["id"] for user in body["_embedded"]["users"]] == [6, 7, 8, 9, 10]
        assert set(body["_links"]) == {"self", "first", "prev", "next", "last"}
        assert "page=3" in body["_links"]["last"]["href"]

    @pytest.mark.asyncio
    async def test_last_page_has_no_next_link(self, api_client):
        response = await api_client.get("/api/users", params={"page": 3, "size": 5})

        links = response.json()["_links"]
        assert "next" not in links
        assert "prev" in links

    @pytest.mark.asyncio
    async def test_page_beyond_range_is_empty(self, api_client):
        response = await api_client.get("/api/users", params={"page": 10})

        assert response.status_code == 200
        assert response.json()["_embedded"]["users"] == []
        assert response.json()["page"]["totalElements"] == SEED_SIZE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size,expected", [(0, 20), (-3, 20), (5000, 1000)])
    async def test_page_size_is_clamped(self, api_client, size, expected):
        response = await api_client.get("/api/users", params={"size": size})

        assert response.json()["page"]["size"] == expected

    @pytest.mark.asyncio
    async def test_unknown_sort_property_is_rejected(self, api_client):
        response = await api_client.get("/api/users", params={"sort": "password,asc"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == get_message("malformed_request")
        assert body["debugMessage"] == get_message("invalid_sort", field="password")


class TestGetUser:
    """GET /api/users/{id}"""

    @pytest.mark.asyncio
    async def test_returns_existing_user(self, api_client):
        response = await api_client.get("/api/users/10")

        assert response.status_code == 200
        user = response.json()
        assert user["id"] == 10
        assert user["email"] == "workingemail-10@gmail.com"

    @pytest.mark.asyncio
    async def test_missing_user_is_not_found(self, api_client):
        response = await api_client.get("/api/users/30")

        assert response.status_code == 404
        body = response.json()
        assert body["status"] == "NOT_FOUND"
        assert body["message"] == get_message("user_not_found", id=30)


class TestCreateUser:
    """POST /api/users"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("first_name,email", [
        ("Ivan", "asdas@asdas.tr"),
        ("El", "asdas@asdas.ru"),
        ("Алёна-Генриэтта", "alyona@asdas.ru"),
    ])
    async def test_creates_user_with_valid_fields(self, api_client, first_name, email):
        body = new_user(firstName=first_name, email=email)

        response = await api_client.post("/api/users", json=body)

        assert response.status_code == 201
        user = response.json()
        assert user["id"] > SEED_SIZE
        for field in ("firstName", "lastName", "dayOfBirth", "email"):
            assert user[field] == body[field]
        assert response.headers["Location"].endswith(f"/api/users/{user['id']}")
        assert await total_elements(api_client) == SEED_SIZE + 1

    @pytest.mark.asyncio
    async def test_ids_keep_increasing(self, api_client):
        first = await api_client.post("/api/users", json=new_user(email="one@asdas.ru"))
        second = await api_client.post("/api/users", json=new_user(email="two@asdas.ru"))

        assert second.json()["id"] == first.json()["id"] + 1

    @pytest.mark.asyncio
    async def test_id_in_body_is_ignored(self, api_client):
        response = await api_client.post("/api/users", json=new_user(id=5))

        assert response.status_code == 201
        assert response.json()["id"] == SEED_SIZE + 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value,bounds", [
        ("firstName", "I", (2, 15)),
        ("firstName", "Ibhjllkjhgfdddrt", (2, 15)),
        ("lastName", "I", (2, 30)),
        ("lastName", "I" * 31, (2, 30)),
    ])
    async def test_rejects_name_outside_length_bounds(self, api_client, field, value, bounds):
        response = await api_client.post("/api/users", json=new_user(**{field: value}))

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "BAD_REQUEST"
        assert body["message"] == get_message("validation_error")
        assert body["subErrors"] == [{
            "object": "user",
            "field": field,
            "rejectedValue": value,
            "message": get_message("size", min=bounds[0], max=bounds[1]),
        }]
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    async def test_rejects_invalid_email(self, api_client):
        response = await api_client.post("/api/users", json=new_user(email="!*)(*&^54678jhgf"))

        assert response.status_code == 400
        assert response.json()["subErrors"][0]["message"] == get_message("email")
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    async def test_email_is_stored_as_sent(self, api_client):
        response = await api_client.post("/api/users", json=new_user(email="Ivan@ASDAS.RU"))

        assert response.status_code == 201
        assert response.json()["email"] == "Ivan@ASDAS.RU"
        assert (await api_client.get(response.headers["Location"])).json()["email"] == "Ivan@ASDAS.RU"

    @pytest.mark.asyncio
    async def test_rejects_duplicate_email_of_new_user(self, api_client):
        first = await api_client.post("/api/users", json=new_user(email="blabla@asdas.ru"))
        second = await api_client.post("/api/users", json=new_user(
            firstName="Stepan", lastName="Petrov", dayOfBirth="2005-01-05", email="blabla@asdas.ru"
        ))

        assert first.status_code == 201
        assert second.status_code == 409
        assert await total_elements(api_client) == SEED_SIZE + 1

    @pytest.mark.asyncio
    async def test_rejects_email_of_existing_user(self, api_client):
        existing = (await api_client.get("/api/users/5")).json()

        response = await api_client.post("/api/users", json=new_user(email=existing["email"]))

        assert response.status_code == 409
        body = response.json()
        assert body["status"] == "CONFLICT"
        assert body["message"] == get_message("database_error")
        assert "users_email_key" in body["debugMessage"]
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    async def test_rejects_malformed_date(self, api_client):
        response = await api_client.post("/api/users", json=new_user(dayOfBirth="2000.01.01"))

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == get_message("malformed_request")
        assert "subErrors" not in body
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("day_of_birth", ["946684800", 946684800, "20000101", "2000-1-1", "01.01.2000", "2000-13-45"])
    async def test_rejects_date_not_in_iso_format(self, api_client, day_of_birth):
        response = await api_client.post("/api/users", json=new_user(dayOfBirth=day_of_birth))

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == get_message("malformed_request")
        assert "subErrors" not in body
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("day_of_birth", ["3000-01-01", date.today().isoformat()])
    async def test_rejects_date_not_in_past(self, api_client, day_of_birth):
        response = await api_client.post("/api/users", json=new_user(dayOfBirth=day_of_birth))

        assert response.status_code == 400
        assert response.json()["subErrors"][0]["message"] == get_message("past")
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    async def test_rejects_missing_fields(self, api_client):
        response = await api_client.post("/api/users", json={"firstName": "Ivan"})

        assert response.status_code == 400
        assert sub_error_fields(response) == {"lastName", "dayOfBirth", "email"}
        messages = {sub_error["message"] for sub_error in response.json()["subErrors"]}
        assert messages == {get_message("not_null")}

    @pytest.mark.asyncio
    async def test_rejects_invalid_json(self, api_client):
        response = await api_client.post(
            "/api/users", content=b'{"firstName": "Ivan",', headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == get_message("malformed_request")


class TestReplaceUser:
    """PUT /api/users/{id}"""

    @pytest.mark.asyncio
    async def test_replaces_existing_user(self, api_client):
        body = new_user(firstName="Julia", lastName="Smith", dayOfBirth="1967-01-01", email="juli@asdas.ru")

        response = await api_client.put("/api/users/3", json=body)

        assert response.status_code == 200
        user = response.json()
        assert user["id"] == 3
        for field in ("firstName", "lastName", "dayOfBirth", "email"):
            assert user[field] == body[field]
        assert (await api_client.get("/api/users/3")).json()["firstName"] == "Julia"

    @pytest.mark.asyncio
    async def test_rejects_empty_fields(self, api_client):
        body = {"firstName": "Mari", "lastName": "", "dayOfBirth": "", "email": ""}

        response = await api_client.put("/api/users/2", json=body)

        assert response.status_code == 400
        assert sub_error_fields(response) == {"lastName", "dayOfBirth", "email"}
        assert (await api_client.get("/api/users/2")).json()["email"] == "workingemail-2@gmail.com"

    @pytest.mark.asyncio
    async def test_keeping_own_email_is_allowed(self, api_client):
        body = new_user(email="workingemail-3@gmail.com")

        response = await api_client.put("/api/users/3", json=body)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_rejects_email_of_other_user(self, api_client):
        response = await api_client.put("/api/users/3", json=new_user(email="workingemail-4@gmail.com"))

        assert response.status_code == 409
        assert (await api_client.get("/api/users/3")).json()["email"] == "workingemail-3@gmail.com"

    @pytest.mark.asyncio
    async def test_unknown_id_creates_user(self, api_client):
        response = await api_client.put("/api/users/51", json=new_user(email="mari@gjgj.com"))

        assert response.status_code == 201
        assert response.json()["id"] == SEED_SIZE + 1
        assert await total_elements(api_client) == SEED_SIZE + 1


class TestPatchUser:
    """PATCH /api/users/{id}"""

    @pytest.mark.asyncio
    async def test_updates_only_supplied_fields(self, api_client):
        before = (await api_client.get("/api/users/12")).json()

        response = await api_client.patch("/api/users/12", json={"firstName": "Ani", "email": "ani@asdas.ru"})

        assert response.status_code == 200
        user = response.json()
        assert user["id"] == 12
        assert user["firstName"] == "Ani"
        assert user["email"] == "ani@asdas.ru"
        assert user["lastName"] == before["lastName"]
        assert user["dayOfBirth"] == before["dayOfBirth"]

    @pytest.mark.asyncio
    async def test_missing_user_is_not_found(self, api_client):
        body = {"firstName": "Mari", "lastName": "", "dayOfBirth": "", "email": ""}

        response = await api_client.patch("/api/users/55", json=body)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_object_body_for_missing_user_is_not_found(self, api_client):
        response = await api_client.patch("/api/users/55", json=[1])

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_object_body_is_malformed(self, api_client):
        response = await api_client.patch("/api/users/12", json=[1])

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == get_message("malformed_request")
        assert body["debugMessage"] == get_message("body_not_object", kind="list")
        assert (await api_client.get("/api/users/12")).json()["firstName"] == SEED[11]["firstName"]

    @pytest.mark.asyncio
    async def test_rejects_invalid_field_and_keeps_user(self, api_client):
        response = await api_client.patch("/api/users/12", json={"firstName": "A"})

        assert response.status_code == 400
        assert sub_error_fields(response) == {"firstName"}
        assert (await api_client.get("/api/users/12")).json()["firstName"] == SEED[11]["firstName"]

    @pytest.mark.asyncio
    async def test_null_field_is_rejected(self, api_client):
        response = await api_client.patch("/api/users/12", json={"lastName": None})

        assert response.status_code == 400
        assert response.json()["subErrors"][0]["message"] == get_message("not_null")

    @pytest.mark.asyncio
    async def test_rejects_email_of_other_user(self, api_client):
        response = await api_client.patch("/api/users/12", json={"email": "workingemail-1@gmail.com"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_id_cannot_be_changed(self, api_client):
        response = await api_client.patch("/api/users/12", json={"id": 99, "lastName": "Brown"})

        assert response.status_code == 200
        assert response.json()["id"] == 12
        assert (await api_client.get("/api/users/99")).status_code == 404


class TestDeleteUser:
    """DELETE /api/users/{id}"""

    @pytest.mark.asyncio
    async def test_deletes_existing_user(self, api_client):
        assert await total_elements(api_client) == SEED_SIZE

        response = await api_client.delete("/api/users/20")

        assert response.status_code == 204
        assert response.content == b""
        assert await total_elements(api_client) == SEED_SIZE - 1
        assert (await api_client.get("/api/users/20")).status_code == 404

    @pytest.mark.asyncio
    async def test_missing_user_is_not_found_and_nothing_changes(self, api_client):
        response = await api_client.delete("/api/users/40")

        assert response.status_code == 404
        assert await total_elements(api_client) == SEED_SIZE

    @pytest.mark.asyncio
    async def test_deleted_ids_are_not_reused(self, api_client):
        await api_client.delete("/api/users/20")

        response = await api_client.post("/api/users", json=new_user())

        assert response.json()["id"] == SEED_SIZE + 1


class TestServiceSurface:
    """Cross-cutting HTTP behavior"""

    @pytest.mark.asyncio
    async def test_responses_carry_trace_id(self, api_client):
        response = await api_client.get("/api/users/1")

        assert len(response.headers["X-Trace-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health_check(self, api_client):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_unsupported_method_uses_error_body(self, api_client):
        response = await api_client.delete("/api/users")

        assert response.status_code == 405
        assert response.json()["status"] == "METHOD_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_store_failure_details_stay_out_of_response(self, api_client, user_store, monkeypatch):
        async def failing_get(user_id):
            raise RuntimeError("connection to postgresql://admin:hunter2@db/users refused")

        monkeypatch.setattr(user_store, "get", failing_get)

        response = await api_client.get("/api/users/1")

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "INTERNAL_SERVER_ERROR"
        assert body["message"] == get_message("internal_error")
        assert "debugMessage" not in body
        assert "hunter2" not in response.text

    @pytest.mark.asyncio
    async def test_failed_insert_details_stay_out_of_response(self, api_client, user_store, monkeypatch):
        async def failing_insert(values):
            raise RuntimeError("connection to postgresql://admin:hunter2@db/users refused")

        monkeypatch.setattr(user_store, "insert", failing_insert)

        response = await api_client.post("/api/users", json=new_user())

        assert response.status_code == 500
        assert "debugMessage" not in response.json()
        assert "hunter2" not in response.text
