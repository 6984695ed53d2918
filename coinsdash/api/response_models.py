"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    reports: int
    visible_reports: int
    active_id: Optional[str] = None


class ReportFlags(BaseModel):
    is_hidden: bool
    part_of_summary: bool
    used_in_summary: bool
    used_in_meta_summary: bool


class ReportSourceModel(BaseModel):
    report_id: str
    label: str


class ReportModel(BaseModel):
    id: str
    display_name: str
    kind: str
    flags: ReportFlags
    sources: list[ReportSourceModel]
    labels: list[str]
    record_count: int
    unique_users: int
    is_active: bool
    is_selected: bool
    selectable: bool


class LineageResponse(BaseModel):
    reports: list[ReportModel]
    active_id: Optional[str] = None
    selected_ids: list[str]
    can_generate_summary: bool
    can_generate_meta_summary: bool


class UploadError(BaseModel):
    file: str
    error: str


class UploadResponse(BaseModel):
    status: str
    loaded: list[dict[str, Any]]
    errors: list[UploadError]
    lineage: LineageResponse


class GenerateResponse(BaseModel):
    generated: bool
    report_id: Optional[str] = None
    lineage: LineageResponse
