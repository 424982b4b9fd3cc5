"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


# Request Models
class LegacyFormIn(BaseModel):
    nid: int
    title: str = ""
    status: int = 1
    confirmation: str = ""
    redirect_url: str = "<confirmation>"


class LegacyComponentIn(BaseModel):
    cid: int
    pid: int = 0
    form_key: str
    name: str = ""
    type: str = "textfield"
    value: str = ""
    extra: Optional[Union[str, Dict[str, Any]]] = None
    mandatory: int = 0
    weight: int = 0


class LegacySubmissionIn(BaseModel):
    sid: int
    uid: Optional[int] = None
    remote_addr: Optional[str] = None
    submitted: Optional[Union[int, str]] = None
    data: Dict[str, Optional[str]] = Field(default_factory=dict)


class FormPreviewRequest(BaseModel):
    form: LegacyFormIn
    components: List[LegacyComponentIn] = Field(default_factory=list)
    submissions: List[LegacySubmissionIn] = Field(default_factory=list)
    watermark: int = 0
    max_submissions: Optional[int] = None
    token_rewrites: Dict[str, str] = Field(default_factory=dict)


# Response Models
class ValidationIssueResponse(BaseModel):
    field: str
    message: str
    severity: str


class FormPreviewResponse(BaseModel):
    form_identifier: str
    title: str
    settings: Dict[str, Any]
    elements: Dict[str, Any]
    submissions: List[Dict[str, Any]]
    notices: List[str]
    issues: List[ValidationIssueResponse]
    max_submission_id: Optional[int] = None


class ComponentPreviewResponse(BaseModel):
    key: str
    target_type: str
    definition: Dict[str, Any]
    element: Dict[str, Any]
