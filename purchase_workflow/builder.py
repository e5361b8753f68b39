"""ServiceBuilder: wires storage backends and the workflow service from AppConfig."""
from purchase_workflow.config import AppConfig
from purchase_workflow.core.catalog import DEFAULT_CATALOG
from purchase_workflow.core.schema import StageCatalog
from purchase_workflow.service import WorkflowService
from purchase_workflow.services.attachment_store.base import AttachmentStore
from purchase_workflow.services.attachment_store.local import LocalAttachmentStore
from purchase_workflow.services.attachment_store.memory import InMemoryAttachmentStore
from purchase_workflow.services.workflow_store.base import WorkflowStore
from purchase_workflow.services.workflow_store.local import LocalWorkflowStore
from purchase_workflow.services.workflow_store.memory import InMemoryWorkflowStore
from purchase_workflow.services.yard_directory.base import YardDirectory
from purchase_workflow.services.yard_directory.static import StaticYardDirectory


class ServiceBuilder:
    """Builds the workflow service by wiring backends from config."""

    def __init__(self, config: AppConfig, catalog: StageCatalog = DEFAULT_CATALOG):
        self.config = config
        self.catalog = catalog

        self._workflow_store = self._build_workflow_store()
        self._attachment_store = self._build_attachment_store()
        self._yard_directory = self._build_yard_directory()

    @property
    def workflow_store(self) -> WorkflowStore:
        return self._workflow_store

    @property
    def attachment_store(self) -> AttachmentStore:
        return self._attachment_store

    @property
    def yard_directory(self) -> YardDirectory:
        return self._yard_directory

    def build(self) -> WorkflowService:
        return WorkflowService(
            store=self._workflow_store,
            attachments=self._attachment_store,
            yards=self._yard_directory,
            catalog=self.catalog,
            default_currency=self.config.default_currency,
        )

    def _build_workflow_store(self) -> WorkflowStore:
        if self.config.workflow_store == "local":
            return LocalWorkflowStore(self.config.workflows_dir)
        if self.config.workflow_store == "memory":
            return InMemoryWorkflowStore()
        raise ValueError(f"Unknown workflow store: {self.config.workflow_store}")

    def _build_attachment_store(self) -> AttachmentStore:
        if self.config.attachment_store == "local":
            return LocalAttachmentStore(
                attachments_dir=self.config.attachments_dir,
                base_url=self.config.attachment_base_url,
                max_bytes=self.config.max_attachment_bytes,
            )
        if self.config.attachment_store == "memory":
            return InMemoryAttachmentStore(max_bytes=self.config.max_attachment_bytes)
        raise ValueError(f"Unknown attachment store: {self.config.attachment_store}")

    def _build_yard_directory(self) -> YardDirectory:
        if self.config.yards_file:
            return StaticYardDirectory.from_yaml(self.config.yards_file)
        return StaticYardDirectory()
