"""Workflow exception types."""
from enum import Enum


class ValidationErrorKind(str, Enum):
    EMPTY_DESCRIPTION = "empty_description"
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    INVALID_ATTACHMENT_TYPE = "invalid_attachment_type"
    ATTACHMENT_TOO_LARGE = "attachment_too_large"
    CURRENCY_MISMATCH = "currency_mismatch"
    COST_NOT_ALLOWED = "cost_not_allowed"
    INACTIVE_YARD = "inactive_yard"
    UNKNOWN_YARD = "unknown_yard"
    UNKNOWN_ATTACHMENT = "unknown_attachment"
    MANAGED_FIELD = "managed_field"


class WorkflowError(Exception):
    """Base class for every error raised by the workflow engine."""

    code = "workflow_error"


class ValidationError(WorkflowError):
    """Raised when caller-supplied input is rejected before any state change."""

    def __init__(self, kind: ValidationErrorKind, message: str):
        self.kind = kind
        self.code = kind.value
        super().__init__(message)


class GatingViolationError(WorkflowError):
    """Raised when a task is completed while its preconditions are unmet."""

    code = "gating_violation"

    def __init__(self, stage_key: str, task_key: str, reasons: list[str]):
        self.stage_key = stage_key
        self.task_key = task_key
        self.reasons = reasons
        super().__init__(
            f"Task {stage_key}.{task_key} is not enabled: {'; '.join(reasons)}"
        )


class WorkflowFinalizedError(WorkflowError):
    """Raised when a finalized workflow is mutated."""

    code = "workflow_finalized"

    def __init__(self, purchase_id: str):
        self.purchase_id = purchase_id
        super().__init__(f"Workflow for purchase {purchase_id} is finalized")


class AlreadyFinalizedError(WorkflowError):
    code = "already_finalized"

    def __init__(self, purchase_id: str):
        self.purchase_id = purchase_id
        super().__init__(f"Workflow for purchase {purchase_id} is already finalized")


class UnknownStageError(WorkflowError):
    code = "unknown_stage"

    def __init__(self, stage_key: str):
        self.stage_key = stage_key
        super().__init__(f"Unknown stage: {stage_key}")


class UnknownTaskError(WorkflowError):
    code = "unknown_task"

    def __init__(self, stage_key: str, task_key: str):
        self.stage_key = stage_key
        self.task_key = task_key
        super().__init__(f"Unknown task for stage {stage_key}: {task_key}")


class UnknownFieldError(WorkflowError):
    code = "unknown_field"

    def __init__(self, stage_key: str, fields: list[str]):
        self.stage_key = stage_key
        self.fields = fields
        super().__init__(f"Unknown fields for stage {stage_key}: {', '.join(fields)}")


class WorkflowNotFoundError(WorkflowError):
    code = "workflow_not_found"

    def __init__(self, purchase_id: str):
        self.purchase_id = purchase_id
        super().__init__(f"No workflow stored for purchase {purchase_id}")


class WorkflowExistsError(WorkflowError):
    code = "workflow_exists"

    def __init__(self, purchase_id: str):
        self.purchase_id = purchase_id
        super().__init__(f"A workflow already exists for purchase {purchase_id}")


class StaleWorkflowError(WorkflowError):
    """Raised when saving a workflow loaded at an outdated revision."""

    code = "stale_workflow"

    def __init__(self, purchase_id: str, expected_version: int, actual_version: int):
        self.purchase_id = purchase_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Workflow for purchase {purchase_id} was modified concurrently: "
            f"loaded at version {expected_version}, stored version is {actual_version}"
        )
