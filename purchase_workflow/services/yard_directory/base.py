from abc import ABC, abstractmethod

from purchase_workflow.core.errors import ValidationError, ValidationErrorKind
from purchase_workflow.core.yard import Yard


class YardDirectory(ABC):
    """Read-only source of yards that stages may be assigned to."""

    @abstractmethod
    def list_yards(self) -> list[Yard]:
        ...

    @abstractmethod
    def get_yard(self, yard_id: str) -> Yard | None:
        ...

    def list_active(self) -> list[Yard]:
        return [yard for yard in self.list_yards() if yard.is_active]

    def require(self, yard_id: str) -> Yard:
        """Look up a yard for selection.

        Raises:
            ValidationError: no yard with this id exists
        """
        yard = self.get_yard(yard_id)
        if yard is None:
            raise ValidationError(ValidationErrorKind.UNKNOWN_YARD, f"Unknown yard: {yard_id}")
        return yard
