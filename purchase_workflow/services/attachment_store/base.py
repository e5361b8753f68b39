import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from purchase_workflow.core.attachment import Attachment, AttachmentKind
from purchase_workflow.core.errors import ValidationError, ValidationErrorKind
from purchase_workflow.engine.clock import utc_now

ALLOWED_CONTENT_TYPES = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/webp",
})

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class Upload(BaseModel):
    """A file received from the UI, before it is stored."""
    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str
    data: bytes


class AttachmentStore(ABC):
    """Abstract interface for attachment storage.

    `store` validates the upload, writes it through the backend-specific
    `_write` and returns a fully formed `Attachment` whose URL the engine can
    attach to cost entries or task completions. Rejected uploads are never
    written. Workflows only reference attachments by id, resolved through
    `require`, so a caller cannot hand the engine an attachment this store
    never validated.
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @abstractmethod
    def _write(self, attachment_id: str, filename: str, upload: Upload) -> str:
        """Persist the bytes and return the URL they can be fetched from."""
        ...

    @abstractmethod
    def _remember(self, attachment: Attachment) -> None:
        """Record the metadata of a stored attachment so `get` can find it."""
        ...

    @abstractmethod
    def get(self, attachment_id: str) -> Attachment | None:
        """Return a previously stored attachment, or None if this store never saw it."""
        ...

    def require(self, attachment_id: str) -> Attachment:
        """Like `get`, but raises ValidationError for unknown ids."""
        attachment = self.get(attachment_id)
        if attachment is None:
            raise ValidationError(
                ValidationErrorKind.UNKNOWN_ATTACHMENT,
                f"Attachment '{attachment_id}' was not uploaded through this store",
            )
        return attachment

    def store(self, upload: Upload, uploaded_by: str, now: datetime | None = None) -> Attachment:
        """Validate and persist an upload.

        Raises:
            ValidationError: unsupported content type or file too large
        """
        content_type = self.validate(upload)
        attachment_id = str(uuid.uuid4())
        filename = self.safe_filename(upload.filename)
        url = self._write(attachment_id, filename, upload)
        attachment = Attachment(
            id=attachment_id,
            name=filename,
            url=url,
            kind=AttachmentKind.IMAGE if content_type.startswith("image/") else AttachmentKind.DOCUMENT,
            size_bytes=len(upload.data),
            uploaded_by=uploaded_by,
            uploaded_at=utc_now(now),
        )
        self._remember(attachment)
        return attachment

    def validate(self, upload: Upload) -> str:
        """Return the normalized content type of an acceptable upload."""
        content_type = upload.content_type.split(";", 1)[0].strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                ValidationErrorKind.INVALID_ATTACHMENT_TYPE,
                f"Unsupported attachment type '{upload.content_type}', "
                f"expected one of {sorted(ALLOWED_CONTENT_TYPES)}",
            )
        if len(upload.data) > self._max_bytes:
            raise ValidationError(
                ValidationErrorKind.ATTACHMENT_TOO_LARGE,
                f"File '{upload.filename}' exceeds the limit of {self._max_bytes} bytes",
            )
        return content_type

    @staticmethod
    def safe_filename(filename: str) -> str:
        name = PurePath(filename.replace("\\", "/")).name.strip()
        return name or "attachment"
