"""
Users service - business logic for the users resource
"""

import logging
import math
from typing import Dict, Any, List, Optional

from pydantic import ValidationError

from config.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from models.user import SORTABLE_FIELDS, WRITABLE_FIELDS, PageMetadata, UserWriteRequest
from services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

SORT_DIRECTIONS = ("asc", "desc")


def parse_sort(sort_params: Optional[List[str]]) -> List[Dict[str, str]]:
    """
    Parse Spring-style sort parameters into ordering specs

    Each parameter is "property[,property...][,asc|desc]"; the direction applies to
    every property listed before it.

    Raises:
        ValueError: on an unknown sort property
    """
    order_by = []
    for param in sort_params or []:
        tokens = [token.strip() for token in param.split(",") if token.strip()]
        if not tokens:
            continue

        direction = "asc"
        if tokens[-1].lower() in SORT_DIRECTIONS:
            direction = tokens.pop().lower()

        for field in tokens:
            if field not in SORTABLE_FIELDS:
                raise ValueError(field)
            order_by.append({"field": field, "dir": direction})
    return order_by


def normalize_page(page: Optional[int], size: Optional[int]) -> tuple[int, int]:
    """Clamp page/size the way Spring Data does: negative page -> 0, bad size -> default"""
    page = max(page or 0, 0)
    if size is None or size < 1:
        size = DEFAULT_PAGE_SIZE
    return page, min(size, MAX_PAGE_SIZE)


class UsersService(BaseService):
    """Service for user management operations"""

    def __init__(self):
        super().__init__("users")

    async def list_users(
        self,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[List[str]] = None
    ) -> ServiceResult:
        """
        Get one page of users

        Returns:
            ServiceResult whose page_info holds the page metadata (size, totalElements,
            totalPages, number)
        """
        try:
            order_by = parse_sort(sort)
        except ValueError as e:
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="INVALID_QUERY"
            )

        page, size = normalize_page(page, size)
        result = await self.read(order_by=order_by, limit=size, offset=page * size)
        if not result.success:
            return result

        total = result.page_info["total"]
        result.page_info = PageMetadata(
            size=size,
            totalElements=total,
            totalPages=math.ceil(total / size),
            number=page
        ).model_dump()
        return result

    async def get_user(self, user_id: int) -> ServiceResult:
        return await self.get_by_id(user_id)

    async def create_user(self, request: UserWriteRequest) -> ServiceResult:
        """Create a new user; the id is assigned by the store"""
        logger.info(f"Creating new user: {request.email}")
        return await self.create(request.to_record())

    async def replace_user(self, user_id: int, request: UserWriteRequest) -> ServiceResult:
        """Replace every writable field of an existing user"""
        logger.info(f"Replacing user {user_id}")
        return await self.update(user_id, request.to_record())

    async def patch_user(self, user_id: int, updates: Any) -> ServiceResult:
        """
        Merge the supplied fields into an existing user

        Unknown fields and "id" are ignored. The merged user must pass the same
        validation as a full replacement.
        """
        existing = await self.get_by_id(user_id)
        if not existing.success:
            return existing

        if not isinstance(updates, dict):
            return ServiceResult(
                success=False,
                error=type(updates).__name__,
                error_type="INVALID_BODY"
            )

        merged = dict(existing.data[0])
        merged.update({field: updates[field] for field in WRITABLE_FIELDS if field in updates})

        try:
            request = UserWriteRequest.model_validate(merged)
        except ValidationError as e:
            return ServiceResult(
                success=False,
                error="Patched user failed validation",
                error_type="VALIDATION_ERROR",
                sub_errors=e.errors()
            )

        logger.info(f"Patching user {user_id}: {sorted(updates)}")
        return await self.update(user_id, request.to_record())

    async def delete_user(self, user_id: int) -> ServiceResult:
        logger.info(f"Deleting user {user_id}")
        return await self.delete(user_id)


# Global service instance
_users_service: Optional[UsersService] = None

def get_users_service() -> UsersService:
    """Get the global users service instance"""
    global _users_service
    if _users_service is None:
        _users_service = UsersService()
    return _users_service
