"""
Request bodies and assertions shared by the users API tests
"""

import httpx

from database.seed import seed_users

SEED = seed_users()
SEED_SIZE = len(SEED)


def new_user(**overrides):
    """A valid create/replace body with optional field overrides"""
    body = {
        "firstName": "Ivan",
        "lastName": "Ivanov",
        "dayOfBirth": "2000-01-01",
        "email": "asdas@asdas.tr",
    }
    body.update(overrides)
    return body


async def total_elements(client: httpx.AsyncClient) -> int:
    response = await client.get("/api/users")
    assert response.status_code == 200
    return response.json()["page"]["totalElements"]


def sub_error_fields(response: httpx.Response) -> set:
    return {sub_error["field"] for sub_error in response.json().get("subErrors", [])}
