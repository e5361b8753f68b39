from purchase_workflow.core.attachment import Attachment
from purchase_workflow.services.attachment_store.base import DEFAULT_MAX_BYTES, AttachmentStore, Upload


class InMemoryAttachmentStore(AttachmentStore):
    """Inspectable in-memory store. Keeps every written file for assertion."""

    def __init__(self, base_url: str = "memory://attachments", max_bytes: int = DEFAULT_MAX_BYTES):
        super().__init__(max_bytes=max_bytes)
        self._base_url = base_url.rstrip("/")
        self._files: dict[str, bytes] = {}
        self._attachments: dict[str, Attachment] = {}

    def _write(self, attachment_id: str, filename: str, upload: Upload) -> str:
        url = f"{self._base_url}/{attachment_id}/{filename}"
        self._files[url] = upload.data
        return url

    def _remember(self, attachment: Attachment) -> None:
        self._attachments[attachment.id] = attachment

    def get(self, attachment_id: str) -> Attachment | None:
        return self._attachments.get(attachment_id)

    # --- Inspection API for tests ---

    def read(self, url: str) -> bytes:
        return self._files[url]

    @property
    def stored_urls(self) -> list[str]:
        return list(self._files)

    def reset(self):
        self._files.clear()
        self._attachments.clear()
