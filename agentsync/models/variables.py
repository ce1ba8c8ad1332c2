"""Categorized template variables found in a composed prompt."""

from typing import Literal

from pydantic import BaseModel


class StaticVariable(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["static"] = "static"
    name: str
    value: str


class OverrideVariable(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["override"] = "override"
    name: str


class DynamicVariable(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["dynamic"] = "dynamic"
    name: str
    value_type: Literal["string", "number", "boolean", "json"]
    description: str


class SystemVariable(BaseModel):
    """Referenced but undeclared; the remote runtime supplies it."""

    model_config = {"frozen": True}

    kind: Literal["system"] = "system"
    name: str


Variable = StaticVariable | OverrideVariable | DynamicVariable | SystemVariable


class VariableSummary(BaseModel):
    """Every token of a prompt, partitioned into the four variable kinds."""

    model_config = {"frozen": True}

    static: list[StaticVariable] = []
    override: list[OverrideVariable] = []
    dynamic: list[DynamicVariable] = []
    system: list[SystemVariable] = []

    def all(self) -> list[Variable]:
        return [*self.static, *self.override, *self.dynamic, *self.system]

    def names(self) -> set[str]:
        return {variable.name for variable in self.all()}

    def static_values(self) -> dict[str, str]:
        return {variable.name: variable.value for variable in self.static}
