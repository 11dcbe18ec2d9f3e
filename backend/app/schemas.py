from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from studio_seating.grid import MAX_GRID_COLUMNS, MAX_GRID_ROWS


class CamelModel(BaseModel):
    # Wire format is camelCase (sessionId, gridRows); snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SeatRecordIn(CamelModel):
    id: Optional[str] = None
    row: Union[int, str]
    column: int
    type: Optional[str] = None
    label: Optional[str] = None
    credit_cost: Optional[int] = Field(default=None, ge=0)
    status: Optional[str] = None

    @field_validator("row")
    @classmethod
    def _row_not_blank(cls, v: Union[int, str]) -> Union[int, str]:
        if isinstance(v, str) and not v.strip():
            raise ValueError("row must not be blank")
        return v


class SeatLayoutCreate(CamelModel):
    location_id: str = Field(min_length=1)
    name: str = "Default"
    # rows are lettered A..Z
    grid_rows: int = Field(ge=1, le=MAX_GRID_ROWS)
    grid_columns: int = Field(ge=1, le=MAX_GRID_COLUMNS)
    is_active: bool = True
    seats: list[SeatRecordIn] = Field(default_factory=list)


class ClassSessionCreate(CamelModel):
    title: str = Field(min_length=1)
    location_id: Optional[str] = None
    starts_at: Optional[datetime] = None


class MemberCreate(CamelModel):
    user_id: str = Field(min_length=1)
    name: str = ""
    email: str = ""


class BookingCreate(CamelModel):
    session_id: int
    # Falls back to the member behind the X-User-Id identity when omitted.
    member_id: Optional[int] = None
    seat_id: str = Field(min_length=1)
    payment_type: str = Field(default="credits", min_length=1)


class SeatGridRequest(CamelModel):
    """Stateless overlay: the caller supplies the layout and the booking list."""

    session_id: str
    layout: Optional[dict[str, Any]] = None
    # Heterogeneous historical shapes; resolved by the overlay, not here.
    bookings: list[Any] = Field(default_factory=list)


class SeatGrid(CamelModel):
    session_id: str
    layout_id: Optional[str] = None
    fallback: bool = False
    seats: list[dict]
    summary: dict
    issues: list[dict] = Field(default_factory=list)
