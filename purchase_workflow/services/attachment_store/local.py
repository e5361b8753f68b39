import logging
from pathlib import Path

from purchase_workflow.core.attachment import Attachment
from purchase_workflow.services.attachment_store.base import DEFAULT_MAX_BYTES, AttachmentStore, Upload

logger = logging.getLogger("purchase_workflow.storage")


class LocalAttachmentStore(AttachmentStore):
    """Writes attachments below a local directory, one folder per attachment.

    Directory structure:
        attachments/
        ├── <attachment id>.json
        └── <attachment id>/
            └── invoice.pdf

    The JSON file holds the attachment metadata returned by `get`.
    URLs are `<base_url>/<attachment id>/<filename>`; serving them is up to
    whatever hosts `attachments_dir`.
    """

    def __init__(
        self,
        attachments_dir: str | Path,
        base_url: str = "/attachments",
        max_bytes: int = DEFAULT_MAX_BYTES,
    ):
        super().__init__(max_bytes=max_bytes)
        self._base_dir = Path(attachments_dir)
        self._base_url = base_url.rstrip("/")
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _write(self, attachment_id: str, filename: str, upload: Upload) -> str:
        folder = self._base_dir / attachment_id
        folder.mkdir(parents=True, exist_ok=True)
        (folder / filename).write_bytes(upload.data)
        logger.info(f"Stored attachment {attachment_id} ({filename}, {len(upload.data)} bytes)")
        return f"{self._base_url}/{attachment_id}/{filename}"

    def _remember(self, attachment: Attachment) -> None:
        self._metadata_path(attachment.id).write_text(attachment.model_dump_json(indent=2))

    def get(self, attachment_id: str) -> Attachment | None:
        if not attachment_id or "/" in attachment_id or "\\" in attachment_id or attachment_id.startswith("."):
            return None
        path = self._metadata_path(attachment_id)
        if not path.exists():
            return None
        return Attachment.model_validate_json(path.read_text())

    def path_for(self, attachment_id: str, filename: str) -> Path:
        return self._base_dir / attachment_id / filename

    def _metadata_path(self, attachment_id: str) -> Path:
        return self._base_dir / f"{attachment_id}.json"
