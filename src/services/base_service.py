"""
Base service layer for unified store operations
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from database.connection import get_user_store
from database.store import DuplicateKeyError

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    page_info: Optional[Dict[str, Any]] = None
    sub_errors: Optional[List[Dict[str, Any]]] = None


class BaseService:
    """Base service that wraps the configured store for unified data access"""

    def __init__(self, resource_name: str):
        self.resource_name = resource_name

    @property
    def store(self):
        return get_user_store()

    async def create(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Create a new record

        Args:
            data: Dictionary of field values to insert

        Returns:
            ServiceResult with created record data
        """
        try:
            record = await self.store.insert(data)
            return ServiceResult(success=True, data=[record], count=1)

        except DuplicateKeyError as e:
            logger.warning(f"Create rejected for {self.resource_name}: {e.detail}")
            return ServiceResult(
                success=False,
                error=e.detail,
                error_type="CONFLICT_ERROR"
            )
        except Exception as e:
            logger.error(f"Create operation failed for {self.resource_name}: {e}", exc_info=True)
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="EXECUTION_ERROR"
            )

    async def read(
        self,
        order_by: Optional[List[Dict[str, str]]] = None,
        limit: int = 20,
        offset: int = 0
    ) -> ServiceResult:
        """
        Read a page of records

        Args:
            order_by: List of ordering specs [{"field": "firstName", "dir": "desc"}]
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            ServiceResult with matched records and the total record count in page_info
        """
        try:
            total = await self.store.count()
            data = await self.store.list(order_by=order_by, limit=limit, offset=offset)
            return ServiceResult(
                success=True,
                data=data,
                count=len(data),
                page_info={"limit": limit, "offset": offset, "total": total}
            )

        except Exception as e:
            logger.error(f"Read operation failed for {self.resource_name}: {e}")
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="EXECUTION_ERROR"
            )

    async def get_by_id(self, record_id: int) -> ServiceResult:
        """
        Get a single record by primary key

        Returns:
            ServiceResult with single record, or RESOURCE_NOT_FOUND
        """
        try:
            record = await self.store.get(record_id)
        except Exception as e:
            logger.error(f"Get operation failed for {self.resource_name}: {e}")
            return ServiceResult(success=False, error=str(e), error_type="EXECUTION_ERROR")

        if record is None:
            return ServiceResult(
                success=False,
                error=f"Record not found with ID: {record_id}",
                error_type="RESOURCE_NOT_FOUND"
            )
        return ServiceResult(success=True, data=[record], count=1)

    async def update(self, record_id: int, data: Dict[str, Any]) -> ServiceResult:
        """
        Update a record

        Args:
            record_id: Primary key value of record to update
            data: Dictionary of field values to update

        Returns:
            ServiceResult with updated record data
        """
        try:
            record = await self.store.update(record_id, data)

        except DuplicateKeyError as e:
            logger.warning(f"Update rejected for {self.resource_name} {record_id}: {e.detail}")
            return ServiceResult(
                success=False,
                error=e.detail,
                error_type="CONFLICT_ERROR"
            )
        except Exception as e:
            logger.error(f"Update operation failed for {self.resource_name}: {e}", exc_info=True)
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="EXECUTION_ERROR"
            )

        if record is None:
            return ServiceResult(
                success=False,
                error=f"Record with id {record_id} not found",
                error_type="RESOURCE_NOT_FOUND"
            )
        return ServiceResult(success=True, data=[record], count=1)

    async def delete(self, record_id: int) -> ServiceResult:
        """
        Delete a record by primary key

        Returns:
            ServiceResult indicating success/failure
        """
        try:
            deleted = await self.store.delete(record_id)
        except Exception as e:
            logger.error(f"Delete operation failed for {self.resource_name}: {e}")
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="EXECUTION_ERROR"
            )

        if not deleted:
            return ServiceResult(
                success=False,
                error=f"Record not found with ID: {record_id}",
                error_type="RESOURCE_NOT_FOUND"
            )
        return ServiceResult(success=True, count=1)
