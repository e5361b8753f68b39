import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, Header, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from purchase_workflow.builder import ServiceBuilder
from purchase_workflow.config import AppConfig
from purchase_workflow.core.attachment import Attachment
from purchase_workflow.core.cost import CostDraft
from purchase_workflow.core.errors import (
    AlreadyFinalizedError,
    GatingViolationError,
    StaleWorkflowError,
    UnknownFieldError,
    UnknownStageError,
    UnknownTaskError,
    ValidationError,
    WorkflowError,
    WorkflowExistsError,
    WorkflowFinalizedError,
    WorkflowNotFoundError,
)
from purchase_workflow.core.yard import Yard
from purchase_workflow.engine.views import WorkflowView, describe_workflow
from purchase_workflow.services.attachment_store.base import Upload

logger = logging.getLogger("purchase_workflow.api")

ERROR_STATUS: dict[type[WorkflowError], int] = {
    ValidationError: 422,
    UnknownFieldError: 422,
    GatingViolationError: 409,
    WorkflowFinalizedError: 409,
    AlreadyFinalizedError: 409,
    WorkflowExistsError: 409,
    StaleWorkflowError: 409,
    WorkflowNotFoundError: 404,
    UnknownStageError: 404,
    UnknownTaskError: 404,
}


class CreateWorkflowRequest(BaseModel):
    currency: str | None = None


class CostInput(BaseModel):
    """Cost captured while completing a task; the task comes from the URL.

    Attachments are referenced by the id returned from `POST /attachments`.
    """
    model_config = ConfigDict(extra="forbid")

    description: str
    amount: Decimal
    currency: str | None = None
    attachment_id: str | None = None

    def to_draft(self, task_key: str) -> CostDraft:
        return CostDraft(
            task_key=task_key, description=self.description, amount=self.amount, currency=self.currency,
        )


class CostRequest(CostInput):
    task_key: str


class TaskUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    completed: bool
    notes: str | None = None
    cost: CostInput | None = None
    attachment_ids: list[str] = Field(default_factory=list)


class YardSelectionRequest(BaseModel):
    yard_id: str | None = None


class FieldsUpdateRequest(BaseModel):
    fields: dict[str, Any]


def _error_response(error: WorkflowError) -> JSONResponse:
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(error, cls)),
        400,
    )
    content: dict[str, Any] = {"code": error.code, "detail": str(error)}
    if isinstance(error, GatingViolationError):
        content["reasons"] = error.reasons
    return JSONResponse(status_code=status, content=content)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Factory function for creating the FastAPI app with config.

    Run with: uvicorn purchase_workflow.api:create_app --factory
    """
    if config is None:
        config = AppConfig.from_yaml("config.yaml") if Path("config.yaml").exists() else AppConfig()

    logging.getLogger("purchase_workflow").setLevel(config.log_level.upper())

    builder = ServiceBuilder(config)
    service = builder.build()
    catalog = builder.catalog

    app = FastAPI(title="Purchase Workflow")

    @app.exception_handler(WorkflowError)
    async def handle_workflow_error(request: Request, exc: WorkflowError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
        return _error_response(exc)

    def view(workflow) -> WorkflowView:
        return describe_workflow(workflow, catalog)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/yards", response_model=list[Yard])
    def list_yards():
        return service.yards.list_active()

    @app.post("/purchases/{purchase_id}/workflow", status_code=201, response_model=WorkflowView)
    def create_workflow(purchase_id: str, body: CreateWorkflowRequest | None = None):
        currency = body.currency if body else None
        return view(service.create(purchase_id, currency))

    @app.get("/purchases/{purchase_id}/workflow", response_model=WorkflowView)
    def get_workflow(purchase_id: str):
        return view(service.get(purchase_id))

    @app.delete("/purchases/{purchase_id}/workflow", status_code=204)
    def delete_workflow(purchase_id: str):
        service.delete(purchase_id)
        return Response(status_code=204)

    @app.put(
        "/purchases/{purchase_id}/workflow/stages/{stage_key}/tasks/{task_key}",
        response_model=WorkflowView,
    )
    def update_task(
        purchase_id: str,
        stage_key: str,
        task_key: str,
        body: TaskUpdateRequest,
        actor: str = Header(alias="X-Actor"),
    ):
        cost = body.cost.to_draft(task_key) if body.cost else None
        workflow = service.set_task(
            purchase_id, stage_key, task_key, body.completed, actor,
            notes=body.notes,
            cost=cost,
            cost_attachment_id=body.cost.attachment_id if body.cost else None,
            attachment_ids=body.attachment_ids,
        )
        return view(workflow)

    @app.put("/purchases/{purchase_id}/workflow/stages/{stage_key}/yard", response_model=WorkflowView)
    def select_yard(
        purchase_id: str,
        stage_key: str,
        body: YardSelectionRequest,
        actor: str = Header(alias="X-Actor"),
    ):
        return view(service.select_yard(purchase_id, stage_key, body.yard_id, actor))

    @app.patch("/purchases/{purchase_id}/workflow/stages/{stage_key}/fields", response_model=WorkflowView)
    def update_fields(
        purchase_id: str,
        stage_key: str,
        body: FieldsUpdateRequest,
        actor: str = Header(alias="X-Actor"),
    ):
        return view(service.update_fields(purchase_id, stage_key, body.fields, actor))

    @app.post(
        "/purchases/{purchase_id}/workflow/stages/{stage_key}/costs",
        status_code=201,
        response_model=WorkflowView,
    )
    def add_cost(
        purchase_id: str,
        stage_key: str,
        body: CostRequest,
        actor: str = Header(alias="X-Actor"),
    ):
        draft = body.to_draft(body.task_key)
        return view(service.add_cost(purchase_id, stage_key, draft, actor, attachment_id=body.attachment_id))

    @app.delete(
        "/purchases/{purchase_id}/workflow/stages/{stage_key}/costs/{cost_id}",
        response_model=WorkflowView,
    )
    def remove_cost(
        purchase_id: str,
        stage_key: str,
        cost_id: str,
        actor: str = Header(alias="X-Actor"),
    ):
        return view(service.remove_cost(purchase_id, stage_key, cost_id, actor))

    @app.post("/purchases/{purchase_id}/workflow/finalize", response_model=WorkflowView)
    def finalize_workflow(purchase_id: str, actor: str = Header(alias="X-Actor")):
        return view(service.finalize(purchase_id, actor))

    @app.post("/attachments", status_code=201, response_model=Attachment)
    async def upload_attachment(
        file: UploadFile = File(...),
        actor: str = Header(alias="X-Actor"),
    ):
        upload = Upload(
            filename=file.filename or "attachment",
            content_type=file.content_type or "application/octet-stream",
            data=await file.read(service.attachments.max_bytes + 1),
        )
        return service.upload_attachment(upload, actor)

    return app
