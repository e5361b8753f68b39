from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AttachmentKind(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"


class Attachment(BaseModel):
    """A stored document or photo attached to a cost entry or task completion.

    `url` comes from the attachment store and is never interpreted by the engine.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    url: str
    kind: AttachmentKind
    size_bytes: int = Field(ge=0)
    uploaded_by: str
    uploaded_at: datetime
