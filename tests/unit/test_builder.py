"""Unit tests for ServiceBuilder."""
import pytest

from purchase_workflow.builder import ServiceBuilder
from purchase_workflow.config import AppConfig
from purchase_workflow.core.catalog import DEFAULT_CATALOG
from purchase_workflow.service import WorkflowService
from purchase_workflow.services.attachment_store.local import LocalAttachmentStore
from purchase_workflow.services.attachment_store.memory import InMemoryAttachmentStore
from purchase_workflow.services.workflow_store.local import LocalWorkflowStore
from purchase_workflow.services.workflow_store.memory import InMemoryWorkflowStore
from purchase_workflow.services.yard_directory.static import StaticYardDirectory
from tests.mocks import MULTI_STAGE_CATALOG


class TestServiceBuilder:
    def test_testing_config_creates_memory_backends(self):
        builder = ServiceBuilder(AppConfig.for_testing())
        assert isinstance(builder.workflow_store, InMemoryWorkflowStore)
        assert isinstance(builder.attachment_store, InMemoryAttachmentStore)
        assert isinstance(builder.yard_directory, StaticYardDirectory)
        assert builder.yard_directory.list_yards() == []

    def test_local_backends(self, tmp_path):
        config = AppConfig(
            workflow_store="local",
            workflows_dir=str(tmp_path / "workflows"),
            attachment_store="local",
            attachments_dir=str(tmp_path / "attachments"),
            max_attachment_bytes=2048,
        )
        builder = ServiceBuilder(config)
        assert isinstance(builder.workflow_store, LocalWorkflowStore)
        assert isinstance(builder.attachment_store, LocalAttachmentStore)
        assert builder.attachment_store.max_bytes == 2048
        assert (tmp_path / "workflows").is_dir()

    def test_yards_loaded_from_file(self, tmp_path):
        yards_file = tmp_path / "yards.yaml"
        yards_file.write_text("yards:\n  - id: y1\n    name: Tokyo Central\n")
        config = AppConfig(workflow_store="memory", attachment_store="memory", yards_file=str(yards_file))
        builder = ServiceBuilder(config)
        assert [y.name for y in builder.yard_directory.list_yards()] == ["Tokyo Central"]

    def test_build_returns_service(self):
        config = AppConfig(workflow_store="memory", attachment_store="memory", default_currency="USD")
        service = ServiceBuilder(config).build()
        assert isinstance(service, WorkflowService)
        assert service.default_currency == "USD"
        assert service.catalog == DEFAULT_CATALOG

    def test_custom_catalog_passed_to_service(self):
        service = ServiceBuilder(AppConfig.for_testing(), catalog=MULTI_STAGE_CATALOG).build()
        assert service.catalog == MULTI_STAGE_CATALOG

    def test_unknown_workflow_store_raises(self):
        with pytest.raises(ValueError, match="Unknown workflow store"):
            ServiceBuilder(AppConfig(workflow_store="postgres", attachment_store="memory"))

    def test_unknown_attachment_store_raises(self):
        with pytest.raises(ValueError, match="Unknown attachment store"):
            ServiceBuilder(AppConfig(workflow_store="memory", attachment_store="s3"))
