"""Reporting schemas."""

import datetime
import typing as t
from uuid import UUID

from ninja import Schema
from pydantic import model_validator

from events.models import Registration

ReportType = t.Literal["membership", "registrations", "attendance"]


class ReportFilterSchema(Schema):
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    event_id: UUID | None = None
    status: Registration.Status | None = None
    include_inactive: bool = False
    format: t.Literal["json", "csv"] = "json"

    @model_validator(mode="after")
    def check_range(self) -> "ReportFilterSchema":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date.")
        return self


class ReportSchema(Schema):
    report_type: ReportType
    generated_at: datetime.datetime
    filters: dict[str, t.Any]
    summary: dict[str, t.Any]
    rows: list[dict[str, t.Any]]


class DashboardSchema(Schema):
    generated_at: datetime.datetime
    membership: dict[str, t.Any]
    registrations: dict[str, t.Any]
    attendance: dict[str, t.Any]
