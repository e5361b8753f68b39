from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from purchase_workflow.core.attachment import Attachment


class TaskCompletion(BaseModel):
    """Audit trail for a single task completion."""
    model_config = ConfigDict(frozen=True)

    completed_by: str
    completed_at: datetime
    notes: str | None = None
    attachments: tuple[Attachment, ...] = ()


class TaskState(BaseModel):
    """Checklist item with completion tracking.

    `completed` is true exactly when a `completion` record is present.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    completed: bool = False
    completion: TaskCompletion | None = Field(default=None)

    @model_validator(mode="after")
    def _completion_matches_flag(self) -> "TaskState":
        if self.completed != (self.completion is not None):
            raise ValueError(
                f"Task '{self.key}': completed={self.completed} requires "
                f"completion to be {'present' if self.completed else 'absent'}"
            )
        return self
