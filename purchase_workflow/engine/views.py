"""Read model handed to the dashboard: derived enablement, progress and totals."""
from decimal import Decimal

from pydantic import BaseModel

from purchase_workflow.core.catalog import DEFAULT_CATALOG
from purchase_workflow.core.cost import CostEntry
from purchase_workflow.core.schema import StageCatalog
from purchase_workflow.core.stage import StageStatus
from purchase_workflow.core.task import TaskCompletion
from purchase_workflow.core.workflow import Workflow
from purchase_workflow.engine import ledger, stages
from purchase_workflow.engine.workflow import (
    can_access_stage,
    max_accessible_stage,
    stage_with_schema,
    workflow_progress,
    workflow_total_cost,
)


class TaskView(BaseModel):
    key: str
    label: str
    description: str
    completed: bool
    enabled: bool
    captures_cost: bool
    blocking_reasons: list[str]
    completion: TaskCompletion | None = None


class StageView(BaseModel):
    key: str
    label: str
    status: StageStatus
    accessible: bool
    completed_items: int
    total_items: int
    missing: list[str]
    fields: dict
    tasks: list[TaskView]
    costs: list[CostEntry]
    total_cost: Decimal
    currency: str | None


class WorkflowView(BaseModel):
    purchase_id: str
    currency: str
    finalized: bool
    progress: int
    current_stage: str | None
    total_cost: dict[str, Decimal]
    version: int
    stages: list[StageView]


def describe_workflow(workflow: Workflow, catalog: StageCatalog = DEFAULT_CATALOG) -> WorkflowView:
    """Everything the UI needs to render a workflow without re-implementing rules.

    Tasks of a finalized workflow are reported as disabled.
    """
    stage_views = []
    for stage_key in workflow.stages:
        stage, schema = stage_with_schema(workflow, stage_key, catalog)
        task_views = []
        for spec in schema.tasks:
            task = stage.task(spec.key)
            reasons = stages.blocking_reasons(stage, schema, spec.key)
            task_views.append(TaskView(
                key=spec.key,
                label=spec.label,
                description=spec.description,
                completed=task is not None and task.completed,
                enabled=not reasons and not workflow.finalized,
                captures_cost=spec.captures_cost,
                blocking_reasons=reasons,
                completion=task.completion if task else None,
            ))
        done, total = stages.stage_progress(stage, schema)
        stage_views.append(StageView(
            key=stage_key,
            label=schema.label,
            status=stages.derive_status(stage, schema),
            accessible=can_access_stage(workflow, stage_key, catalog),
            completed_items=done,
            total_items=total,
            missing=stages.missing_requirements(stage, schema),
            fields=dict(stage.fields),
            tasks=task_views,
            costs=list(stage.costs),
            total_cost=ledger.total_cost(stage),
            currency=ledger.stage_currency(stage) or workflow.currency,
        ))

    return WorkflowView(
        purchase_id=workflow.purchase_id,
        currency=workflow.currency,
        finalized=workflow.finalized,
        progress=workflow_progress(workflow, catalog),
        current_stage=max_accessible_stage(workflow, catalog),
        total_cost=workflow_total_cost(workflow),
        version=workflow.version,
        stages=stage_views,
    )
