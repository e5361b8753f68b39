from datetime import datetime

from pydantic import Field

from purchase_workflow.core.frozen import FrozenModel
from purchase_workflow.core.stage import Stage


class Workflow(FrozenModel):
    """Processing workflow of one purchase.

    `stages` keeps insertion order, which is the processing order.
    `version` is the stored revision this value was loaded at; stores use it
    to reject concurrent overwrites.
    """

    id: str
    purchase_id: str
    currency: str
    stages: dict[str, Stage] = Field(default_factory=dict)
    finalized: bool = False
    finalized_at: datetime | None = None
    finalized_by: str | None = None
    created_at: datetime
    updated_at: datetime
    version: int = 0

    def stage(self, stage_key: str) -> Stage | None:
        return self.stages.get(stage_key)
