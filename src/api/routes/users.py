"""
Users API routes - Spring Data REST style resource
All data access goes through the users service layer.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Body, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from models.user import UserWriteRequest
from services.base_service import ServiceResult
from services.users_service import get_users_service
from utils.error_handling import ApiException, StructuredLogger
from utils.messages import get_message

router = APIRouter()


def _users_url(request: Request) -> str:
    return str(request.url_for("list_users"))


def user_resource(user: Dict[str, Any], request: Request) -> Dict[str, Any]:
    """Serialize a stored user with its HAL links"""
    href = f"{_users_url(request)}/{user['id']}"
    day_of_birth = user["dayOfBirth"]
    return {
        "id": user["id"],
        "firstName": user["firstName"],
        "lastName": user["lastName"],
        "dayOfBirth": day_of_birth.isoformat() if hasattr(day_of_birth, "isoformat") else day_of_birth,
        "email": user["email"],
        "_links": {
            "self": {"href": href},
            "user": {"href": href},
        },
    }


def _page_links(request: Request, page_info: Dict[str, int], sort: Optional[List[str]]) -> Dict[str, Any]:
    base = _users_url(request)

    def href(number: int) -> str:
        params = [("page", number), ("size", page_info["size"])]
        params.extend(("sort", value) for value in sort or [])
        return f"{base}?{urlencode(params)}"

    number = page_info["number"]
    last = max(page_info["totalPages"] - 1, 0)
    links = {"self": {"href": href(number)}}
    if number > 0:
        links["first"] = {"href": href(0)}
        links["prev"] = {"href": href(min(number - 1, last))}
    if number < last:
        links["next"] = {"href": href(number + 1)}
        links["last"] = {"href": href(last)}
    return links


def raise_for_result(result: ServiceResult, user_id: Optional[int] = None):
    """Translate a failed service result into the matching HTTP error"""
    if result.success:
        return
    if result.error_type == "RESOURCE_NOT_FOUND":
        raise ApiException(404, get_message("user_not_found", id=user_id), debug_message=result.error)
    elif result.error_type == "CONFLICT_ERROR":
        raise ApiException(409, get_message("database_error"), debug_message=result.error)
    elif result.error_type == "VALIDATION_ERROR":
        raise RequestValidationError(result.sub_errors)
    elif result.error_type == "INVALID_QUERY":
        raise ApiException(400, get_message("malformed_request"), debug_message=get_message("invalid_sort", field=result.error))
    elif result.error_type == "INVALID_BODY":
        raise ApiException(400, get_message("malformed_request"), debug_message=get_message("body_not_object", kind=result.error))
    else:
        # Store errors are logged, never returned to the client
        StructuredLogger.log_error("SERVICE_ERROR", result.error or "Unknown service error", include_traceback=False)
        raise ApiException(500, get_message("internal_error"))


@router.get("", name="list_users")
async def list_users(
    request: Request,
    page: Optional[int] = Query(None, description="Zero-based page number"),
    size: Optional[int] = Query(None, description="Page size"),
    sort: Optional[List[str]] = Query(None, description="property[,asc|desc], repeatable")
):
    """Get a page of users"""
    result = await get_users_service().list_users(page=page, size=size, sort=sort)
    raise_for_result(result)

    return {
        "_embedded": {"users": [user_resource(user, request) for user in result.data]},
        "_links": _page_links(request, result.page_info, sort),
        "page": result.page_info,
    }


@router.get("/{user_id}")
async def get_user(user_id: int, request: Request):
    """Get user details"""
    result = await get_users_service().get_user(user_id)
    raise_for_result(result, user_id)
    return user_resource(result.data[0], request)


@router.post("", status_code=201)
async def create_user(body: UserWriteRequest, request: Request):
    """Create a new user"""
    users_service = get_users_service()

    try:
        result = await users_service.create_user(body)
        raise_for_result(result)

        user = user_resource(result.data[0], request)
        return JSONResponse(
            status_code=201,
            content=user,
            headers={"Location": user["_links"]["self"]["href"]}
        )

    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        StructuredLogger.log_error("SERVICE_ERROR", "Failed to create user", request=request, exception=e)
        raise ApiException(500, get_message("internal_error"))


@router.put("/{user_id}")
async def replace_user(user_id: int, body: UserWriteRequest, request: Request):
    """Replace all fields of a user; creates the user when the id is unknown"""
    users_service = get_users_service()

    try:
        existing = await users_service.get_user(user_id)
        if not existing.success and existing.error_type == "RESOURCE_NOT_FOUND":
            # The path id is not reused: ids are always assigned by the store
            result = await users_service.create_user(body)
            raise_for_result(result)
            user = user_resource(result.data[0], request)
            return JSONResponse(
                status_code=201,
                content=user,
                headers={"Location": user["_links"]["self"]["href"]}
            )
        raise_for_result(existing, user_id)

        result = await users_service.replace_user(user_id, body)
        raise_for_result(result, user_id)
        return user_resource(result.data[0], request)

    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        StructuredLogger.log_error("SERVICE_ERROR", "Failed to replace user", request=request, exception=e)
        raise ApiException(500, get_message("internal_error"))


@router.patch("/{user_id}")
async def patch_user(user_id: int, request: Request, updates: Any = Body(...)):
    """Update only the supplied fields of a user"""
    result = await get_users_service().patch_user(user_id, updates)
    raise_for_result(result, user_id)
    return user_resource(result.data[0], request)


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: int):
    """Delete a user"""
    result = await get_users_service().delete_user(user_id)
    raise_for_result(result, user_id)
    return Response(status_code=204)
