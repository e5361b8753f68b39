from enum import Enum
from typing import Any

from pydantic import Field

from purchase_workflow.core.cost import CostEntry
from purchase_workflow.core.frozen import FrozenModel
from purchase_workflow.core.task import TaskState


class StageStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Stage(FrozenModel):
    """One processing stage of a purchase: tasks, stage fields and cost ledger.

    `status` is always derived by the engine from tasks and preconditions;
    whatever a caller puts there is overwritten on the next mutation.
    """

    key: str
    status: StageStatus = StageStatus.NOT_STARTED
    tasks: dict[str, TaskState] = Field(default_factory=dict)
    costs: tuple[CostEntry, ...] = ()
    fields: dict[str, Any] = Field(default_factory=dict)

    def task(self, task_key: str) -> TaskState | None:
        return self.tasks.get(task_key)

    def is_task_completed(self, task_key: str) -> bool:
        task = self.tasks.get(task_key)
        return task is not None and task.completed
