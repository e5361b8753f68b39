from collections.abc import Iterable
from datetime import datetime

from purchase_workflow.core.attachment import Attachment
from purchase_workflow.core.task import TaskCompletion, TaskState
from purchase_workflow.engine.clock import utc_now


def update_task_completion(
    task: TaskState,
    completed: bool,
    actor: str,
    notes: str | None = None,
    attachments: Iterable[Attachment] = (),
    now: datetime | None = None,
) -> TaskState:
    """Return `task` moved to the requested completion state.

    Completing stamps a fresh audit record for `actor`; uncompleting drops the
    record entirely. Gating is not checked here.
    """
    if completed:
        return TaskState(
            key=task.key,
            completed=True,
            completion=TaskCompletion(
                completed_by=actor,
                completed_at=utc_now(now),
                notes=notes or None,
                attachments=tuple(attachments),
            ),
        )
    return TaskState(key=task.key, completed=False)
