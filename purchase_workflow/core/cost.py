from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from purchase_workflow.core.attachment import Attachment


class CostDraft(BaseModel):
    """Caller-supplied part of a cost entry, validated by the ledger."""
    model_config = ConfigDict(frozen=True)

    task_key: str
    description: str
    amount: Decimal
    currency: str | None = None
    attachment: Attachment | None = None


class CostEntry(BaseModel):
    """A monetary record in a stage's ledger, tagged with the task it relates to."""
    model_config = ConfigDict(frozen=True)

    id: str
    task_key: str
    description: str
    amount: Decimal
    currency: str
    attachment: Attachment | None = None
    created_by: str
    created_at: datetime
    recorded_on_completion: bool = False
