from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.app.models.block import LiteralScalar, LiteralValue

MAX_PROGRAM_NODES = 500


def _is_finite_literal(value: object) -> bool:
    if isinstance(value, list):
        return all(_is_finite_literal(item) for item in value)
    if isinstance(value, float):
        return math.isfinite(value)
    return True


class ValueBinding(BaseModel):
    literal: LiteralValue | None = None
    node_id: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def validate_single_source(self) -> "ValueBinding":
        if (self.literal is None) == (self.node_id is None):
            raise ValueError("A value binding needs exactly one of 'literal' or 'node_id'.")
        if not _is_finite_literal(self.literal):
            raise ValueError("Numeric literals must be finite.")
        return self

    @classmethod
    def of(cls, value: LiteralValue) -> "ValueBinding":
        return cls(literal=value)

    @classmethod
    def ref(cls, node_id: str) -> "ValueBinding":
        return cls(node_id=node_id)


class BlockPosition(BaseModel):
    x: float = 0.0
    y: float = 0.0


class BlockNode(BaseModel):
    model_config = {"frozen": True}

    id: str = Field(min_length=1)
    kind: str = Field(min_length=1)
    inputs: dict[str, ValueBinding] = Field(default_factory=dict)
    statements: dict[str, str] = Field(default_factory=dict)
    fields: dict[str, LiteralScalar] = Field(default_factory=dict)
    next: str | None = None
    position: BlockPosition = Field(default_factory=BlockPosition)

    @field_validator("fields")
    @classmethod
    def validate_finite_fields(cls, fields: dict[str, LiteralScalar]) -> dict[str, LiteralScalar]:
        for name, value in fields.items():
            if not _is_finite_literal(value):
                raise ValueError(f"Field '{name}' must be a finite number.")
        return fields


class ProgramGraph(BaseModel):
    nodes: list[BlockNode] = Field(default_factory=list)

    @field_validator("nodes")
    @classmethod
    def validate_node_count(cls, nodes: list[BlockNode]) -> list[BlockNode]:
        if len(nodes) > MAX_PROGRAM_NODES:
            raise ValueError(f"Program exceeds maximum node count ({MAX_PROGRAM_NODES})")
        return nodes

    @model_validator(mode="after")
    def validate_unique_node_ids(self) -> "ProgramGraph":
        ids = [node.id for node in self.nodes]
        if len(ids) != len(set(ids)):
            raise ValueError("Node IDs must be unique")
        return self

    def node_map(self) -> dict[str, BlockNode]:
        return {node.id: node for node in self.nodes}


class GeneratedProgram(BaseModel):
    program: str
    macros: list[str] = Field(default_factory=list)
    body: str = ""
    diagnostics: list[str] = Field(default_factory=list)


class CompileRequest(BaseModel):
    graph: ProgramGraph
    root_id: str | None = Field(default=None, min_length=1)


class CompileResponse(GeneratedProgram):
    pass
