from __future__ import annotations

import pytest

from backend.app.models.program import BlockNode
from backend.app.services.codegen_errors import CyclicStatementChain, CyclicValueInput
from backend.app.services.generation_context import GenerationContext


def test_nested_scope_restores_outer_tag() -> None:
    context = GenerationContext()

    with context.scope("music"):
        with context.scope("motif"):
            assert context.scope_tag == "motif"
        assert context.scope_tag == "music"
        assert context.in_scope
    assert context.scope_tag is None
    assert not context.in_scope


def test_scope_is_cleared_when_generation_fails() -> None:
    context = GenerationContext()

    with pytest.raises(RuntimeError):
        with context.scope("music"):
            raise RuntimeError("boom")

    assert context.scope_tag is None


def test_reserved_macro_slots_keep_entry_order() -> None:
    context = GenerationContext()

    outer = context.reserve_macro("outer")
    inner = context.reserve_macro("inner")
    context.fill_macro(inner, "inner\n")
    context.fill_macro(outer, "outer\n")

    assert context.hoisted_macros() == ["outer\n", "inner\n"]
    assert context.reserve_macro("outer") == outer


def test_resolving_detects_reentry() -> None:
    context = GenerationContext()
    node = BlockNode(id="n", kind="math_arithmetic")

    with context.resolving(node):
        with pytest.raises(CyclicValueInput):
            with context.resolving(node):
                pass
    assert context.resolution_stack == []


def test_statement_nodes_are_visited_once() -> None:
    context = GenerationContext()
    node = BlockNode(id="s", kind="stop_sound")

    context.visit_statement(node)
    with pytest.raises(CyclicStatementChain):
        context.visit_statement(node)
