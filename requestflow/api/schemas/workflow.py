"""Schemas for workflow actions and request views."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ActionRequest(BaseModel):
    """Body of ``POST /api/{domain}/{request_id}/action``."""
    model_config = ConfigDict(populate_by_name=True)

    action: str
    comments: Optional[str] = None
    approver_role: str = Field(..., alias="approverRole", min_length=1)
    approver_name: str = Field(..., alias="approverName", min_length=1)
    expected_status: Optional[str] = Field(None, alias="expectedStatus")


class WorkflowRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    domain: str
    id: str
    status: str
    requestor_ref: str
    attributes: Dict[str, Any]
    version: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ActionResponse(BaseModel):
    message: str
    status: str
    request: WorkflowRequestResponse


class ApprovalStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    step_role: str
    actor_name: str
    actor_role: str
    action: str
    from_status: str
    status: str = Field(validation_alias="result_status")
    comments: Optional[str]
    date: datetime = Field(validation_alias="created_at")


class RequestHistoryResponse(BaseModel):
    domain: str
    request_id: str
    status: str
    steps: List[ApprovalStepResponse]
