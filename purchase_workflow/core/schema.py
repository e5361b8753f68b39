"""Declarative stage schemas: which tasks a stage has and how they are gated."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from purchase_workflow.core.errors import UnknownStageError


class TaskSpec(BaseModel):
    """One task of a stage schema.

    `depends_on` lists tasks that must be completed before this one is enabled.
    `captures_cost` allows an amount to be recorded while completing the task.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    description: str = ""
    depends_on: tuple[str, ...] = ()
    captures_cost: bool = False


class FieldPrecondition(BaseModel):
    """Stage-level precondition: holds when `field` has a non-empty value."""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str

    def holds(self, fields: dict[str, Any]) -> bool:
        value = fields.get(self.field)
        return value is not None and value != ""


class StageSchema(BaseModel):
    """Ordered task list, gating rules and declared fields of a stage type.

    Every precondition gates every task of the stage. Task dependencies must
    reference tasks declared earlier, so the dependency graph is always acyclic
    and the declared order is a valid processing order.
    `managed_fields` are written only by dedicated operations (yard selection),
    never by a generic field update.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    tasks: tuple[TaskSpec, ...]
    preconditions: tuple[FieldPrecondition, ...] = ()
    fields: tuple[str, ...] = ()
    managed_fields: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_task_graph(self) -> "StageSchema":
        seen: set[str] = set()
        for spec in self.tasks:
            if spec.key in seen:
                raise ValueError(f"Stage '{self.key}': duplicate task '{spec.key}'")
            unknown = [dep for dep in spec.depends_on if dep not in seen]
            if unknown:
                raise ValueError(
                    f"Stage '{self.key}': task '{spec.key}' depends on tasks not "
                    f"declared before it: {unknown}"
                )
            seen.add(spec.key)
        undeclared = [p.field for p in self.preconditions if p.field not in self.fields]
        if undeclared:
            raise ValueError(
                f"Stage '{self.key}': preconditions reference undeclared fields: {undeclared}"
            )
        undeclared_managed = [name for name in self.managed_fields if name not in self.fields]
        if undeclared_managed:
            raise ValueError(
                f"Stage '{self.key}': managed fields are not declared: {undeclared_managed}"
            )
        return self

    @property
    def task_keys(self) -> list[str]:
        return [spec.key for spec in self.tasks]

    def task_spec(self, task_key: str) -> TaskSpec | None:
        for spec in self.tasks:
            if spec.key == task_key:
                return spec
        return None


class StageCatalog(BaseModel):
    """Ordered set of stage schemas a workflow is built from."""
    model_config = ConfigDict(frozen=True)

    stages: tuple[StageSchema, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _unique_keys(self) -> "StageCatalog":
        keys = [schema.key for schema in self.stages]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"Duplicate stage keys in catalog: {duplicates}")
        return self

    @property
    def stage_keys(self) -> list[str]:
        return [schema.key for schema in self.stages]

    def get(self, stage_key: str) -> StageSchema:
        for schema in self.stages:
            if schema.key == stage_key:
                return schema
        raise UnknownStageError(stage_key)

    def __contains__(self, stage_key: str) -> bool:
        return stage_key in self.stage_keys
