"""Per-stage cost ledger: validated appends, removal by id and totals."""
import uuid
from datetime import datetime
from decimal import Decimal

from purchase_workflow.core.cost import CostDraft, CostEntry
from purchase_workflow.core.errors import UnknownTaskError, ValidationError, ValidationErrorKind
from purchase_workflow.core.schema import StageSchema
from purchase_workflow.core.stage import Stage
from purchase_workflow.engine.clock import utc_now


def stage_currency(stage: Stage) -> str | None:
    """Currency established by the first entry of the ledger, if any."""
    return stage.costs[0].currency if stage.costs else None


def validate_cost(
    stage: Stage,
    draft: CostDraft,
    default_currency: str,
    schema: StageSchema | None = None,
) -> str:
    """Check a draft against the ledger rules and return its resolved currency.

    With a schema, the draft must be tagged with a task declared as capturing
    costs.

    Raises:
        ValidationError: task does not capture costs, empty description,
            non-positive amount or a currency different from the one already
            used in this stage
        UnknownTaskError: the draft is tagged with a task the schema lacks
    """
    if schema is not None:
        spec = schema.task_spec(draft.task_key)
        if spec is None:
            raise UnknownTaskError(schema.key, draft.task_key)
        if not spec.captures_cost:
            raise ValidationError(
                ValidationErrorKind.COST_NOT_ALLOWED,
                f"Task {schema.key}.{draft.task_key} does not record costs",
            )

    if not draft.description.strip():
        raise ValidationError(
            ValidationErrorKind.EMPTY_DESCRIPTION, "Cost description must not be empty"
        )

    if not draft.amount.is_finite() or draft.amount <= 0:
        raise ValidationError(
            ValidationErrorKind.NON_POSITIVE_AMOUNT,
            f"Cost amount must be greater than zero, got {draft.amount}",
        )

    currency = (draft.currency or default_currency).upper()
    established = stage_currency(stage)
    if established is not None and currency != established:
        raise ValidationError(
            ValidationErrorKind.CURRENCY_MISMATCH,
            f"Stage '{stage.key}' records costs in {established}, got {currency}",
        )
    return currency


def add_cost(
    stage: Stage,
    draft: CostDraft,
    actor: str,
    default_currency: str,
    schema: StageSchema | None = None,
    now: datetime | None = None,
    recorded_on_completion: bool = False,
) -> Stage:
    """Append a validated cost entry; the input stage is never modified."""
    currency = validate_cost(stage, draft, default_currency, schema)
    entry = CostEntry(
        id=str(uuid.uuid4()),
        task_key=draft.task_key,
        description=draft.description.strip(),
        amount=draft.amount,
        currency=currency,
        attachment=draft.attachment,
        created_by=actor,
        created_at=utc_now(now),
        recorded_on_completion=recorded_on_completion,
    )
    return stage.model_copy(update={"costs": stage.costs + (entry,)})


def remove_cost(stage: Stage, cost_id: str) -> Stage:
    """Drop the entry with `cost_id`. Unknown ids leave the stage as is."""
    remaining = tuple(entry for entry in stage.costs if entry.id != cost_id)
    if len(remaining) == len(stage.costs):
        return stage
    return stage.model_copy(update={"costs": remaining})


def remove_completion_costs(stage: Stage, task_key: str) -> Stage:
    """Drop the entries captured while completing `task_key`."""
    remaining = tuple(
        entry for entry in stage.costs
        if not (entry.task_key == task_key and entry.recorded_on_completion)
    )
    if len(remaining) == len(stage.costs):
        return stage
    return stage.model_copy(update={"costs": remaining})


def total_cost(stage: Stage) -> Decimal:
    return sum((entry.amount for entry in stage.costs), Decimal("0"))


def costs_by_task(stage: Stage) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for entry in stage.costs:
        totals[entry.task_key] = totals.get(entry.task_key, Decimal("0")) + entry.amount
    return totals
