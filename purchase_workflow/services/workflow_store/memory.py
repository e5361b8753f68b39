from purchase_workflow.core.errors import WorkflowNotFoundError
from purchase_workflow.core.workflow import Workflow
from purchase_workflow.services.workflow_store.base import WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """Keeps serialized workflows in a dict, so loads go through the same JSON
    schema as the local store."""

    def __init__(self):
        self._documents: dict[str, str] = {}

    def load(self, purchase_id: str) -> Workflow:
        document = self._documents.get(purchase_id)
        if document is None:
            raise WorkflowNotFoundError(purchase_id)
        return Workflow.model_validate_json(document)

    def save(self, workflow: Workflow) -> Workflow:
        stored_version = None
        if workflow.purchase_id in self._documents:
            stored_version = self.load(workflow.purchase_id).version
        saved = self.next_revision(workflow, stored_version)
        self._documents[saved.purchase_id] = saved.model_dump_json()
        return saved

    def exists(self, purchase_id: str) -> bool:
        return purchase_id in self._documents

    def delete(self, purchase_id: str) -> None:
        self._documents.pop(purchase_id, None)

    @property
    def purchase_ids(self) -> list[str]:
        return sorted(self._documents)
