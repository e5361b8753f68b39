from collections.abc import Iterable
from pathlib import Path

import yaml

from purchase_workflow.core.yard import Yard
from purchase_workflow.services.yard_directory.base import YardDirectory


class StaticYardDirectory(YardDirectory):
    """Fixed list of yards, optionally loaded from a YAML file.

    YAML format:
        yards:
          - id: yard-tokyo
            name: Tokyo Central
            status: active
            city: Tokyo
            capacity: 120
    """

    def __init__(self, yards: Iterable[Yard] = ()):
        self._yards = {yard.id: yard for yard in yards}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "StaticYardDirectory":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(Yard(**entry) for entry in data.get("yards", []))

    def list_yards(self) -> list[Yard]:
        return sorted(self._yards.values(), key=lambda yard: yard.name)

    def get_yard(self, yard_id: str) -> Yard | None:
        return self._yards.get(yard_id)
