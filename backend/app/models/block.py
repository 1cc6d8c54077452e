from __future__ import annotations

from enum import IntEnum, StrEnum

from pydantic import BaseModel, Field

LiteralScalar = str | int | float | bool
LiteralValue = LiteralScalar | list[LiteralScalar]


class Precedence(IntEnum):
    """Binding strength of a generated expression. Lower binds tighter."""

    ATOMIC = 0
    FUNCTION_CALL = 1
    UNARY = 2
    MULTIPLICATIVE = 3
    ADDITIVE = 4
    CONCATENATION = 5
    NONE = 99


class ScopeRole(StrEnum):
    NONE = "none"
    MUSIC = "music"
    MOTIF = "motif"


class FieldKind(StrEnum):
    DROPDOWN = "dropdown"
    TEXT = "text"
    NUMBER = "number"


class FieldOption(BaseModel):
    label: str = Field(min_length=1)
    token: str = Field(min_length=1)


class FieldSpec(BaseModel):
    name: str = Field(min_length=1)
    kind: FieldKind
    options: list[FieldOption] = Field(default_factory=list)
    default: LiteralScalar | None = None

    def token_for(self, value: object) -> str | None:
        for option in self.options:
            if option.token == value:
                return option.token
        return None

    @property
    def default_token(self) -> str | None:
        if self.default is not None:
            return str(self.default)
        if self.options:
            return self.options[0].token
        return None


class ValueInputSpec(BaseModel):
    name: str = Field(min_length=1)
    check: list[str] = Field(default_factory=list)
    required: bool = True
    default: LiteralValue | None = None
    label: str = ""


class StatementInputSpec(BaseModel):
    name: str = Field(min_length=1)
    check: list[str] = Field(default_factory=list)
    required: bool = False
    label: str = ""


class BlockSpec(BaseModel):
    kind: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: str = ""
    colour: int = 275
    inputs: list[ValueInputSpec] = Field(default_factory=list)
    statement_inputs: list[StatementInputSpec] = Field(default_factory=list)
    fields: list[FieldSpec] = Field(default_factory=list)
    previous_statement: bool = False
    next_statement: bool = False
    output: list[str] | None = None
    precedence: Precedence | None = None
    scope: ScopeRole = ScopeRole.NONE
    tags: list[str] = Field(default_factory=list)

    @property
    def is_statement(self) -> bool:
        return self.previous_statement or self.next_statement

    @property
    def produces_value(self) -> bool:
        return self.output is not None

    @property
    def defines_scope(self) -> bool:
        return self.scope != ScopeRole.NONE

    def find_field(self, name: str) -> FieldSpec | None:
        for item in self.fields:
            if item.name == name:
                return item
        return None
