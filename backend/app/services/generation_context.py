from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from backend.app.models.program import BlockNode
from backend.app.services.codegen_errors import CyclicStatementChain, CyclicValueInput


@dataclass(slots=True)
class GenerationContext:
    """Mutable state owned by exactly one compile call."""

    scope_tag: str | None = None
    macros: list[str | None] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)
    resolution_stack: list[str] = field(default_factory=list)
    visited_statements: set[str] = field(default_factory=set)
    macro_owners: dict[str, int] = field(default_factory=dict)

    @property
    def in_scope(self) -> bool:
        return self.scope_tag is not None

    @contextmanager
    def scope(self, tag: str) -> Iterator[None]:
        previous = self.scope_tag
        self.scope_tag = tag
        try:
            yield
        finally:
            self.scope_tag = previous

    @contextmanager
    def resolving(self, node: BlockNode) -> Iterator[None]:
        if node.id in self.resolution_stack:
            raise CyclicValueInput(node.id, node.kind, list(self.resolution_stack))
        self.resolution_stack.append(node.id)
        try:
            yield
        finally:
            self.resolution_stack.pop()

    def visit_statement(self, node: BlockNode) -> None:
        if node.id in self.visited_statements:
            raise CyclicStatementChain(node.id, node.kind)
        self.visited_statements.add(node.id)

    def reserve_macro(self, owner_id: str) -> int:
        slot = self.macro_owners.get(owner_id)
        if slot is None:
            slot = len(self.macros)
            self.macros.append(None)
            self.macro_owners[owner_id] = slot
        return slot

    def fill_macro(self, slot: int, text: str) -> None:
        self.macros[slot] = text

    def hoisted_macros(self) -> list[str]:
        return [macro for macro in self.macros if macro]

    def degrade(self, message: str) -> None:
        self.diagnostics.append(message)
