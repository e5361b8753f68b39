"""Base class for immutable workflow values that hold dicts."""
import copy
from typing import Any

from pydantic import BaseModel, ConfigDict


class FrozenModel(BaseModel):
    """Frozen model whose dict fields are never shared between copies.

    `frozen=True` only blocks attribute assignment, and a shallow `model_copy`
    would hand the very same dict objects to the copy. Dict fields are
    deep-copied instead, so changing one version in place cannot leak into
    another.
    """
    model_config = ConfigDict(frozen=True)

    def model_copy(self, *, update: dict[str, Any] | None = None, deep: bool = False):
        copied = super().model_copy(update=update, deep=deep)
        if not deep:
            for name, value in list(copied.__dict__.items()):
                if isinstance(value, dict):
                    copied.__dict__[name] = copy.deepcopy(value)
        return copied
