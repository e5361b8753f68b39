from abc import ABC, abstractmethod

from purchase_workflow.core.errors import StaleWorkflowError, WorkflowNotFoundError
from purchase_workflow.core.workflow import Workflow


class WorkflowStore(ABC):
    """Abstract interface for workflow persistence, one document per purchase.

    Saving uses optimistic concurrency: a workflow may only be saved when its
    `version` matches the stored revision (0 for a purchase with nothing
    stored yet). The returned workflow carries the new revision and must be
    used for the next mutation.
    """

    @abstractmethod
    def load(self, purchase_id: str) -> Workflow:
        """Load the workflow of a purchase.

        Raises:
            WorkflowNotFoundError: nothing stored for this purchase
        """
        ...

    @abstractmethod
    def save(self, workflow: Workflow) -> Workflow:
        """Persist a workflow and return it stamped with its new revision.

        Raises:
            StaleWorkflowError: the stored revision moved on since `workflow` was loaded
        """
        ...

    @abstractmethod
    def exists(self, purchase_id: str) -> bool:
        ...

    @abstractmethod
    def delete(self, purchase_id: str) -> None:
        """Remove a purchase's workflow. Deleting a missing one is a no-op."""
        ...

    @staticmethod
    def next_revision(workflow: Workflow, stored_version: int | None) -> Workflow:
        """Check `workflow` against the stored revision and stamp the next one.

        `stored_version` is None when nothing is stored for the purchase.
        """
        if stored_version is None:
            if workflow.version != 0:
                raise WorkflowNotFoundError(workflow.purchase_id)
        elif stored_version != workflow.version:
            raise StaleWorkflowError(workflow.purchase_id, workflow.version, stored_version)
        return workflow.model_copy(update={"version": workflow.version + 1})
