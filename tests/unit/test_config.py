"""Unit tests for AppConfig."""
from pathlib import Path

import pytest

from purchase_workflow.config import AppConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Prevent real env vars and .env file from leaking into tests."""
    monkeypatch.chdir(tmp_path)
    for key in ("WORKFLOW_STORE", "WORKFLOWS_DIR", "ATTACHMENT_STORE", "DEFAULT_CURRENCY", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


class TestAppConfig:
    def test_creates_with_defaults(self):
        config = AppConfig()
        assert config.workflow_store == "local"
        assert config.workflows_dir == "data/workflows"
        assert config.attachment_store == "local"
        assert config.attachments_dir == "data/attachments"
        assert config.attachment_base_url == "/attachments"
        assert config.max_attachment_bytes == 10 * 1024 * 1024
        assert config.yards_file is None
        assert config.default_currency == "JPY"
        assert config.log_level == "INFO"

    def test_from_yaml(self, tmp_path):
        yaml_content = """\
workflow_store: memory
attachment_store: memory
default_currency: USD
max_attachment_bytes: 1024
yards_file: yards.yaml
"""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml_content)

        config = AppConfig.from_yaml(yaml_file)
        assert config.workflow_store == "memory"
        assert config.attachment_store == "memory"
        assert config.default_currency == "USD"
        assert config.max_attachment_bytes == 1024
        assert config.yards_file == "yards.yaml"

    def test_from_empty_yaml_uses_defaults(self, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("")
        config = AppConfig.from_yaml(yaml_file)
        assert config.workflow_store == "local"

    def test_from_yaml_with_real_config(self):
        config_path = Path(__file__).parent.parent.parent / "config.yaml"
        config = AppConfig.from_yaml(config_path)
        assert config.workflow_store == "local"
        assert config.yards_file == "yards.yaml"
        assert config.default_currency == "JPY"

    def test_for_testing(self):
        config = AppConfig.for_testing()
        assert config.workflow_store == "memory"
        assert config.attachment_store == "memory"
        assert config.yards_file is None

    def test_reads_default_currency_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_CURRENCY", "EUR")
        config = AppConfig()
        assert config.default_currency == "EUR"

    def test_reads_store_from_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("WORKFLOW_STORE=memory\n")
        config = AppConfig()
        assert config.workflow_store == "memory"
