"""Mutation API: the sanctioned operations that turn one workflow into the next.

Each operation checks the finalization lock first, applies a stage-level
change and routes the result through `update_workflow_stage`.
"""
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from purchase_workflow.core.attachment import Attachment
from purchase_workflow.core.catalog import DEFAULT_CATALOG
from purchase_workflow.core.cost import CostDraft
from purchase_workflow.core.errors import ValidationError, ValidationErrorKind
from purchase_workflow.core.schema import StageCatalog
from purchase_workflow.core.workflow import Workflow
from purchase_workflow.core.yard import Yard
from purchase_workflow.engine import ledger, stages
from purchase_workflow.engine.workflow import ensure_editable, stage_with_schema, update_workflow_stage


def set_task(
    workflow: Workflow,
    stage_key: str,
    task_key: str,
    completed: bool,
    actor: str,
    notes: str | None = None,
    cost: CostDraft | None = None,
    attachments: Iterable[Attachment] = (),
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    """Complete or uncomplete a task; a no-op request returns `workflow` itself."""
    ensure_editable(workflow)
    stage, schema = stage_with_schema(workflow, stage_key, catalog)
    new_stage = stages.set_task_completion(
        stage, schema, task_key, completed, actor,
        notes=notes,
        cost=cost,
        attachments=attachments,
        default_currency=workflow.currency,
        now=now,
    )
    if new_stage is stage:
        return workflow
    return update_workflow_stage(workflow, stage_key, new_stage, catalog, now)


def complete_task(
    workflow: Workflow,
    stage_key: str,
    task_key: str,
    actor: str,
    notes: str | None = None,
    cost: CostDraft | None = None,
    attachments: Iterable[Attachment] = (),
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    return set_task(
        workflow, stage_key, task_key, True, actor,
        notes=notes, cost=cost, attachments=attachments, catalog=catalog, now=now,
    )


def uncomplete_task(
    workflow: Workflow,
    stage_key: str,
    task_key: str,
    actor: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    return set_task(workflow, stage_key, task_key, False, actor, catalog=catalog, now=now)


def add_workflow_cost(
    workflow: Workflow,
    stage_key: str,
    draft: CostDraft,
    actor: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    ensure_editable(workflow)
    stage, schema = stage_with_schema(workflow, stage_key, catalog)
    new_stage = ledger.add_cost(stage, draft, actor, workflow.currency, schema, now)
    return update_workflow_stage(workflow, stage_key, new_stage, catalog, now)


def remove_workflow_cost(
    workflow: Workflow,
    stage_key: str,
    cost_id: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    ensure_editable(workflow)
    stage, _ = stage_with_schema(workflow, stage_key, catalog)
    new_stage = ledger.remove_cost(stage, cost_id)
    if new_stage is stage:
        return workflow
    return update_workflow_stage(workflow, stage_key, new_stage, catalog, now)


def update_stage_fields(
    workflow: Workflow,
    stage_key: str,
    fields: dict[str, Any],
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    ensure_editable(workflow)
    stage, schema = stage_with_schema(workflow, stage_key, catalog)
    new_stage = stages.set_stage_fields(stage, schema, **fields)
    return update_workflow_stage(workflow, stage_key, new_stage, catalog, now)


def select_yard(
    workflow: Workflow,
    stage_key: str,
    yard: Yard | None,
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    """Snapshot a yard's id and name into the stage; `None` clears it.

    Raises:
        ValidationError: the yard is not active
    """
    ensure_editable(workflow)
    if yard is not None and not yard.is_active:
        raise ValidationError(
            ValidationErrorKind.INACTIVE_YARD, f"Yard {yard.id} ({yard.name}) is not active"
        )
    stage, schema = stage_with_schema(workflow, stage_key, catalog)
    if yard is None:
        new_stage = stages.set_yard(stage, schema, None)
    else:
        new_stage = stages.set_yard(stage, schema, yard.id, yard.name)
    return update_workflow_stage(workflow, stage_key, new_stage, catalog, now)
