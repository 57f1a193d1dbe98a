from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from .dates import is_draw_key


def _validate_iso_date(value: str) -> str:
    if not is_draw_key(value):
        raise ValueError("Date must be in YYYY-MM-DD format.")
    return value


class NoParams(BaseModel):
    pass


class RawJsonParams(BaseModel):
    raw_json: str = Field(..., description="Raw JSON string containing lottery result data")


class FetchDatesParams(BaseModel):
    dates: List[Tuple[str, str, str]] = Field(
        ..., description="Array of date tuples [day, month, year]"
    )

    @field_validator("dates")
    @classmethod
    def validate_dates(cls, value: List[Tuple[str, str, str]]) -> List[Tuple[str, str, str]]:
        for day, month, year in value:
            if not (day.isdigit() and month.isdigit() and year.isdigit()):
                raise ValueError("Date components must be numeric strings.")
            if len(year) != 4:
                raise ValueError("Year must have four digits.")
        return value


class DateParams(BaseModel):
    date: str = Field(..., description="Date in YYYY-MM-DD format")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _validate_iso_date(value)


class DateLimitParams(DateParams):
    limit: Optional[int] = Field(None, ge=1, description="Optional limit for number of results")


class DateRangeParams(BaseModel):
    start_date: str = Field(..., description="Start date in YYYY-MM-DD format")
    end_date: str = Field(..., description="End date in YYYY-MM-DD format")

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, value: str) -> str:
        return _validate_iso_date(value)


class YearParams(BaseModel):
    year: str = Field(..., pattern=r"^\d{4}$", description="Year in YYYY format")


class MonthParams(YearParams):
    month: str = Field(..., pattern=r"^\d{1,2}$", description="Month in MM format")


class LatestParams(BaseModel):
    limit: int = Field(10, ge=1, description="Number of results to return (default: 10)")


class NumberParams(BaseModel):
    number: str = Field(..., min_length=1, description="Lottery number to search for")
