"""
User-related Pydantic models
"""

import re
from datetime import date
from typing import Annotated, Any, Dict, List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field, PastDate, field_validator
from pydantic_core import PydanticCustomError

# Size bounds shared by the request model and the error messages
FIELD_SIZES: Dict[str, Tuple[int, int]] = {
    "firstName": (2, 15),
    "lastName": (2, 30),
}

WRITABLE_FIELDS = ("firstName", "lastName", "dayOfBirth", "email")
SORTABLE_FIELDS = ("id",) + WRITABLE_FIELDS

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def check_email(value: str) -> str:
    """Validate e-mail syntax but keep the address exactly as sent"""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise PydanticCustomError(
            "value_error",
            "value is not a valid email address: {reason}",
            {"reason": str(e)}
        )
    return value


EmailAddress = Annotated[str, AfterValidator(check_email)]


class UserWriteRequest(BaseModel):
    """Body of POST and PUT; also validates the merged user of a PATCH"""
    firstName: str = Field(..., min_length=FIELD_SIZES["firstName"][0], max_length=FIELD_SIZES["firstName"][1])
    lastName: str = Field(..., min_length=FIELD_SIZES["lastName"][0], max_length=FIELD_SIZES["lastName"][1])
    dayOfBirth: PastDate
    email: EmailAddress

    @field_validator("dayOfBirth", mode="before")
    @classmethod
    def iso_date_only(cls, value):
        # An empty date string deserializes to null, which is then rejected as not-null
        if value is None or isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise PydanticCustomError("date_type", "Input should be a date string in the format YYYY-MM-DD")
        if not value.strip():
            return None
        if not ISO_DATE.match(value):
            raise PydanticCustomError("date_parsing", "Input should be a valid date in the format YYYY-MM-DD")
        return value

    def to_record(self) -> Dict[str, object]:
        return {
            "firstName": self.firstName,
            "lastName": self.lastName,
            "dayOfBirth": self.dayOfBirth,
            "email": self.email,
        }


class PageMetadata(BaseModel):
    """Pagination envelope returned with the users collection"""
    size: int
    totalElements: int
    totalPages: int
    number: int


class SubError(BaseModel):
    object: str = "user"
    field: Optional[str] = None
    rejectedValue: Optional[Any] = None
    message: str


class ApiErrorBody(BaseModel):
    status: str
    timestamp: str
    message: str
    debugMessage: Optional[str] = None
    subErrors: Optional[List[SubError]] = None
