"""Workflow aggregate: creation, the single stage-replacement entry point,
finalization and read-only progress helpers."""
import math
import uuid
from datetime import datetime
from decimal import Decimal

from purchase_workflow.core.catalog import DEFAULT_CATALOG
from purchase_workflow.core.errors import (
    AlreadyFinalizedError,
    UnknownStageError,
    WorkflowFinalizedError,
)
from purchase_workflow.core.schema import StageCatalog, StageSchema
from purchase_workflow.core.stage import Stage, StageStatus
from purchase_workflow.core.workflow import Workflow
from purchase_workflow.engine.clock import utc_now
from purchase_workflow.engine.ledger import total_cost
from purchase_workflow.engine.stages import create_stage, derive_status, with_derived_status


def create_workflow(
    purchase_id: str,
    currency: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    """Fresh workflow with one untouched stage per catalog entry, in order."""
    timestamp = utc_now(now)
    return Workflow(
        id=str(uuid.uuid4()),
        purchase_id=purchase_id,
        currency=currency.upper(),
        stages={schema.key: create_stage(schema) for schema in catalog.stages},
        created_at=timestamp,
        updated_at=timestamp,
    )


def ensure_editable(workflow: Workflow) -> None:
    if workflow.finalized:
        raise WorkflowFinalizedError(workflow.purchase_id)


def stage_with_schema(
    workflow: Workflow,
    stage_key: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
) -> tuple[Stage, StageSchema]:
    stage = workflow.stages.get(stage_key)
    if stage is None:
        raise UnknownStageError(stage_key)
    return stage, catalog.get(stage_key)


def update_workflow_stage(
    workflow: Workflow,
    stage_key: str,
    new_stage: Stage,
    catalog: StageCatalog = DEFAULT_CATALOG,
    now: datetime | None = None,
) -> Workflow:
    """Replace one stage, re-deriving its status. All stage changes go through here.

    Raises:
        WorkflowFinalizedError: the workflow is finalized
        UnknownStageError: the workflow or catalog has no such stage
    """
    ensure_editable(workflow)
    _, schema = stage_with_schema(workflow, stage_key, catalog)
    if new_stage.key != stage_key:
        raise ValueError(f"Stage key mismatch: expected '{stage_key}', got '{new_stage.key}'")

    stages = {**workflow.stages, stage_key: with_derived_status(new_stage, schema)}
    return workflow.model_copy(update={"stages": stages, "updated_at": utc_now(now)})


def finalize(workflow: Workflow, actor: str, now: datetime | None = None) -> Workflow:
    """Lock the workflow against further stage changes.

    Raises:
        AlreadyFinalizedError: the existing finalization stamp is kept
    """
    if workflow.finalized:
        raise AlreadyFinalizedError(workflow.purchase_id)
    timestamp = utc_now(now)
    return workflow.model_copy(update={
        "finalized": True,
        "finalized_by": actor,
        "finalized_at": timestamp,
        "updated_at": timestamp,
    })


# --- Read helpers ---


def is_stage_complete(
    workflow: Workflow,
    stage_key: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
) -> bool:
    stage, schema = stage_with_schema(workflow, stage_key, catalog)
    return derive_status(stage, schema) == StageStatus.COMPLETED


def can_access_stage(
    workflow: Workflow,
    stage_key: str,
    catalog: StageCatalog = DEFAULT_CATALOG,
) -> bool:
    """A stage is accessible once every stage before it is complete."""
    if stage_key not in workflow.stages:
        raise UnknownStageError(stage_key)
    for key in workflow.stages:
        if key == stage_key:
            return True
        if not is_stage_complete(workflow, key, catalog):
            return False
    return True


def max_accessible_stage(
    workflow: Workflow,
    catalog: StageCatalog = DEFAULT_CATALOG,
) -> str | None:
    """Key of the furthest stage that can currently be worked on."""
    furthest = None
    for key in workflow.stages:
        furthest = key
        if not is_stage_complete(workflow, key, catalog):
            break
    return furthest


def all_stages_complete(workflow: Workflow, catalog: StageCatalog = DEFAULT_CATALOG) -> bool:
    return all(is_stage_complete(workflow, key, catalog) for key in workflow.stages)


def workflow_progress(workflow: Workflow, catalog: StageCatalog = DEFAULT_CATALOG) -> int:
    """Percentage of completed stages, rounded half up."""
    if not workflow.stages:
        return 0
    completed = sum(1 for key in workflow.stages if is_stage_complete(workflow, key, catalog))
    return math.floor(completed * 100 / len(workflow.stages) + 0.5)


def workflow_total_cost(workflow: Workflow) -> dict[str, Decimal]:
    """Ledger totals across all stages, per currency."""
    totals: dict[str, Decimal] = {}
    for stage in workflow.stages.values():
        if not stage.costs:
            continue
        currency = stage.costs[0].currency
        totals[currency] = totals.get(currency, Decimal("0")) + total_cost(stage)
    return totals
