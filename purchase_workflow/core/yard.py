from enum import Enum

from pydantic import BaseModel, ConfigDict


class YardStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Yard(BaseModel):
    """Selectable storage yard as listed by the yard directory."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    status: YardStatus = YardStatus.ACTIVE
    city: str = ""
    capacity: int | None = None

    @property
    def is_active(self) -> bool:
        return self.status == YardStatus.ACTIVE
