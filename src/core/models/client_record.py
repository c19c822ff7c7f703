"""
ClientRecord model representing one validated client line (immutable).
"""

from datetime import date
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


def new_guid() -> str:
    """Default identifier factory: a random UUID4 string."""
    return str(uuid4())


class ClientRecord(BaseModel):
    """
    A validated client, created once by the line parser and never mutated.

    Attributes:
        guid: UUID string, generated at creation when absent
        full_name: "<name> <last_name>", 1-100 characters
        dni: National identity number, the natural unique key
        status: Client status code, 1-10 characters
        ingress_at: Ingress calendar date (UTC)
        is_pep: Politically exposed person flag
        is_obligate_subject: Obligate subject flag, None when unknown
    """

    guid: str = Field(default_factory=new_guid)
    full_name: str = Field(..., min_length=1, max_length=100)
    dni: int = Field(..., gt=0)
    status: str = Field(..., min_length=1, max_length=10)
    ingress_at: date
    is_pep: bool
    is_obligate_subject: bool | None = None

    @field_validator("guid")
    @classmethod
    def check_guid(cls, v: str) -> str:
        """Accept only UUID text; stored in canonical lowercase form."""
        try:
            return str(UUID(v))
        except ValueError as e:
            raise ValueError(f"guid must be a UUID, got \"{v}\"") from e

    @field_validator("full_name", "status")
    @classmethod
    def check_not_blank(cls, v: str) -> str:
        """Reject values made only of whitespace."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "guid": "8a0f3c1e-2b9d-4c55-9a61-0d3f0f6e2b11",
                "full_name": "Juan Perez",
                "dni": 12345678,
                "status": "ACTIVO",
                "ingress_at": "2023-11-15",
                "is_pep": True,
                "is_obligate_subject": True
            }
        }
