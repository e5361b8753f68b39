import logging
from pathlib import Path

from purchase_workflow.core.errors import WorkflowNotFoundError
from purchase_workflow.core.workflow import Workflow
from purchase_workflow.services.workflow_store.base import WorkflowStore

logger = logging.getLogger("purchase_workflow.storage")


class LocalWorkflowStore(WorkflowStore):
    """Stores each workflow as a JSON document on the local filesystem.

    Directory structure:
        workflows/
        ├── PUR-2025-001.json
        └── PUR-2025-002.json
    """

    def __init__(self, workflows_dir: str | Path):
        self._base_dir = Path(workflows_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def load(self, purchase_id: str) -> Workflow:
        path = self._path(purchase_id)
        if not path.exists():
            raise WorkflowNotFoundError(purchase_id)
        return Workflow.model_validate_json(path.read_text(encoding="utf-8"))

    def save(self, workflow: Workflow) -> Workflow:
        path = self._path(workflow.purchase_id)
        stored_version = self.load(workflow.purchase_id).version if path.exists() else None
        saved = self.next_revision(workflow, stored_version)

        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(saved.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(path)
        logger.info(f"Saved workflow for purchase {saved.purchase_id} at version {saved.version}")
        return saved

    def exists(self, purchase_id: str) -> bool:
        return self._path(purchase_id).exists()

    def delete(self, purchase_id: str) -> None:
        path = self._path(purchase_id)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted workflow for purchase {purchase_id}")

    def _path(self, purchase_id: str) -> Path:
        if not purchase_id or "/" in purchase_id or "\\" in purchase_id or purchase_id.startswith("."):
            raise ValueError(f"Invalid purchase id: {purchase_id!r}")
        return self._base_dir / f"{purchase_id}.json"
