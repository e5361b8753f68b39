"""Stage aggregate: gating, status derivation and stage-level mutations.

Every function here is pure: it receives a stage plus the schema describing
its type and returns a new stage with `status` re-derived.
"""
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from purchase_workflow.core.attachment import Attachment
from purchase_workflow.core.cost import CostDraft
from purchase_workflow.core.errors import (
    GatingViolationError,
    UnknownFieldError,
    UnknownTaskError,
    ValidationError,
    ValidationErrorKind,
)
from purchase_workflow.core.schema import StageSchema, TaskSpec
from purchase_workflow.core.stage import Stage, StageStatus
from purchase_workflow.core.task import TaskState
from purchase_workflow.core.catalog import YARD_ID_FIELD, YARD_NAME_FIELD
from purchase_workflow.engine.ledger import add_cost, remove_completion_costs, validate_cost
from purchase_workflow.engine.tasks import update_task_completion


def create_stage(schema: StageSchema) -> Stage:
    """Build the initial, untouched stage for a schema."""
    stage = Stage(
        key=schema.key,
        tasks={key: TaskState(key=key) for key in schema.task_keys},
        fields={name: None for name in schema.fields},
    )
    return with_derived_status(stage, schema)


def _require_spec(schema: StageSchema, task_key: str) -> TaskSpec:
    spec = schema.task_spec(task_key)
    if spec is None:
        raise UnknownTaskError(schema.key, task_key)
    return spec


def blocking_reasons(stage: Stage, schema: StageSchema, task_key: str) -> list[str]:
    """Reasons `task_key` cannot be completed right now; empty when enabled."""
    spec = _require_spec(schema, task_key)
    reasons = [p.message for p in schema.preconditions if not p.holds(stage.fields)]
    for dep in spec.depends_on:
        if not stage.is_task_completed(dep):
            reasons.append(f"{_label(schema, dep)} not completed")
    return reasons


def is_task_enabled(stage: Stage, schema: StageSchema, task_key: str) -> bool:
    return not blocking_reasons(stage, schema, task_key)


def derive_status(stage: Stage, schema: StageSchema) -> StageStatus:
    preconditions = [p.holds(stage.fields) for p in schema.preconditions]
    tasks_done = [stage.is_task_completed(key) for key in schema.task_keys]

    if all(preconditions) and all(tasks_done):
        return StageStatus.COMPLETED
    if not any(preconditions) and not any(tasks_done):
        return StageStatus.NOT_STARTED
    return StageStatus.IN_PROGRESS


def with_derived_status(stage: Stage, schema: StageSchema) -> Stage:
    status = derive_status(stage, schema)
    if status == stage.status:
        return stage
    return stage.model_copy(update={"status": status})


def set_task_completion(
    stage: Stage,
    schema: StageSchema,
    task_key: str,
    completed: bool,
    actor: str,
    notes: str | None = None,
    cost: CostDraft | None = None,
    attachments: Iterable[Attachment] = (),
    default_currency: str | None = None,
    now: datetime | None = None,
) -> Stage:
    """Complete or uncomplete a task, enforcing gating.

    Completing may capture a cost (only for tasks declared with
    `captures_cost`); that entry is tagged as recorded on completion.
    Uncompleting removes those entries together with the audit record, but
    tasks gated behind this one keep their state.
    Requesting the state a task is already in returns the stage unchanged.

    Raises:
        UnknownTaskError: task not declared by the schema
        GatingViolationError: completing a task that is not enabled
        ValidationError: invalid or disallowed cost draft
    """
    spec = _require_spec(schema, task_key)
    current = stage.tasks.get(task_key) or TaskState(key=task_key)
    if current.completed == completed:
        return with_derived_status(stage, schema)

    if not completed:
        tasks = {**stage.tasks, task_key: update_task_completion(current, False, actor)}
        updated = remove_completion_costs(stage.model_copy(update={"tasks": tasks}), task_key)
        return with_derived_status(updated, schema)

    reasons = blocking_reasons(stage, schema, task_key)
    if reasons:
        raise GatingViolationError(schema.key, task_key, reasons)

    if cost is not None:
        if not spec.captures_cost:
            raise ValidationError(
                ValidationErrorKind.COST_NOT_ALLOWED,
                f"Task {schema.key}.{task_key} does not record a cost on completion",
            )
        if cost.task_key != task_key:
            cost = cost.model_copy(update={"task_key": task_key})
        if default_currency is None and cost.currency is None:
            raise ValueError("default_currency is required when the cost has no currency")
        validate_cost(stage, cost, default_currency or "", schema)

    task = update_task_completion(current, True, actor, notes, attachments, now)
    updated = stage.model_copy(update={"tasks": {**stage.tasks, task_key: task}})
    if cost is not None:
        updated = add_cost(
            updated, cost, actor, default_currency or "", schema, now,
            recorded_on_completion=True,
        )
    return with_derived_status(updated, schema)


def set_stage_fields(stage: Stage, schema: StageSchema, **fields: Any) -> Stage:
    """Update free-form stage fields.

    Fields the schema marks as managed (the yard snapshot) are rejected here;
    they change only through their own operation. Already-completed tasks are
    left alone even when a field they are gated on gets cleared.

    Raises:
        UnknownFieldError: field not declared by the schema
        ValidationError: field is managed by a dedicated operation
    """
    unknown = sorted(name for name in fields if name not in schema.fields)
    if unknown:
        raise UnknownFieldError(schema.key, unknown)
    managed = sorted(name for name in fields if name in schema.managed_fields)
    if managed:
        raise ValidationError(
            ValidationErrorKind.MANAGED_FIELD,
            f"Fields {managed} of stage '{schema.key}' are set through yard selection",
        )
    return _write_fields(stage, schema, fields)


def _write_fields(stage: Stage, schema: StageSchema, fields: dict[str, Any]) -> Stage:
    updated = stage.model_copy(update={"fields": {**stage.fields, **fields}})
    return with_derived_status(updated, schema)


def set_yard(
    stage: Stage,
    schema: StageSchema,
    yard_id: str | None,
    yard_name: str | None = None,
) -> Stage:
    """Store a yard snapshot; `yard_id=None` clears the selection."""
    missing = [name for name in (YARD_ID_FIELD, YARD_NAME_FIELD) if name not in schema.fields]
    if missing:
        raise UnknownFieldError(schema.key, missing)
    if yard_id is None:
        yard_name = None
    return _write_fields(stage, schema, {YARD_ID_FIELD: yard_id, YARD_NAME_FIELD: yard_name})


def stage_progress(stage: Stage, schema: StageSchema) -> tuple[int, int]:
    """Satisfied preconditions plus completed tasks, out of their total."""
    done = sum(1 for p in schema.preconditions if p.holds(stage.fields))
    done += sum(1 for key in schema.task_keys if stage.is_task_completed(key))
    return done, len(schema.preconditions) + len(schema.tasks)


def missing_requirements(stage: Stage, schema: StageSchema) -> list[str]:
    """Human-readable list of what still blocks the stage from completing."""
    missing = [p.message for p in schema.preconditions if not p.holds(stage.fields)]
    missing.extend(
        f"{spec.label} not completed"
        for spec in schema.tasks
        if not stage.is_task_completed(spec.key)
    )
    return missing


def _label(schema: StageSchema, task_key: str) -> str:
    spec = schema.task_spec(task_key)
    return spec.label if spec else task_key
