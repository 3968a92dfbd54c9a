"""Workflow action and request view endpoints."""

from fastapi import APIRouter, Depends

from requestflow.api.deps import get_workflow_engine
from requestflow.api.schemas.common import ErrorResponse
from requestflow.api.schemas.workflow import (
    ActionRequest,
    ActionResponse,
    ApprovalStepResponse,
    RequestHistoryResponse,
    WorkflowRequestResponse,
)
from requestflow.core.workflow.engine import Actor, WorkflowEngine
from requestflow.core.workflow.states import WorkflowAction

router = APIRouter(tags=["workflow"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

ACTION_PAST_TENSE = {
    WorkflowAction.APPROVE.value: "approved",
    WorkflowAction.REJECT.value: "rejected",
    WorkflowAction.CANCEL.value: "cancelled",
    WorkflowAction.PROCESS.value: "sent for processing",
    WorkflowAction.COMPLETE.value: "completed",
}


@router.post(
    "/{domain}/{request_id}/action",
    response_model=ActionResponse,
    responses=ERROR_RESPONSES,
)
def perform_action(
    domain: str,
    request_id: str,
    body: ActionRequest,
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    """Approve, reject, cancel or process a request."""
    request = engine.perform_action(
        domain,
        request_id,
        body.action,
        Actor(name=body.approver_name, role=body.approver_role),
        body.comments,
        expected_status=body.expected_status,
    )
    return ActionResponse(
        message=f"{domain.capitalize()} request {request_id} {ACTION_PAST_TENSE[body.action]}",
        status=request.status,
        request=WorkflowRequestResponse.model_validate(request),
    )


@router.get(
    "/{domain}/{request_id}",
    response_model=WorkflowRequestResponse,
    responses=ERROR_RESPONSES,
)
def get_request(
    domain: str,
    request_id: str,
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    """Get the current state of a request."""
    return WorkflowRequestResponse.model_validate(engine.get_request(domain, request_id))


@router.get(
    "/{domain}/{request_id}/history",
    response_model=RequestHistoryResponse,
    responses=ERROR_RESPONSES,
)
def get_request_history(
    domain: str,
    request_id: str,
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    """Get the approval history of a request, oldest first."""
    request = engine.get_request(domain, request_id)
    steps = engine.ledger.list_steps(request.domain, request.id)
    return RequestHistoryResponse(
        domain=request.domain,
        request_id=request.id,
        status=request.status,
        steps=[ApprovalStepResponse.model_validate(step) for step in steps],
    )
