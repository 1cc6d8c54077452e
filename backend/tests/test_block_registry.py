from __future__ import annotations

import pytest

from backend.app.models.block import Precedence, ScopeRole
from backend.app.services.block_generators import GENERATORS
from backend.app.services.block_registry import BlockRegistry
from backend.app.services.codegen_errors import UnknownKind


def test_lookup_returns_declared_capabilities() -> None:
    registry = BlockRegistry()

    play = registry.lookup("play_synth")
    assert [item.name for item in play.inputs] == ["NOTES", "BEATS"]
    assert play.is_statement
    assert not play.produces_value

    arithmetic = registry.lookup("math_arithmetic")
    assert arithmetic.produces_value
    assert arithmetic.precedence == Precedence.ADDITIVE


def test_lookup_unknown_kind_raises() -> None:
    with pytest.raises(UnknownKind) as exc_info:
        BlockRegistry().lookup("kazoo", node_id="n1")

    assert exc_info.value.kind == "kazoo"
    assert exc_info.value.node_id == "n1"


def test_scope_defining_kinds() -> None:
    registry = BlockRegistry()

    assert registry.lookup("defmotif").scope == ScopeRole.MOTIF
    for kind in ("play_in_key", "with_fx", "play_chord_progression"):
        assert registry.lookup(kind).scope == ScopeRole.MUSIC
    assert not registry.lookup("cue").defines_scope


def test_every_kind_has_a_generator() -> None:
    assert BlockRegistry().kinds() == frozenset(GENERATORS)


def test_list_and_categories() -> None:
    registry = BlockRegistry()

    notes = registry.list_blocks("notes")
    assert [block.kind for block in notes] == ["chord", "premade_chord"]
    assert registry.categories()["notes"] == 2
    assert sum(registry.categories().values()) == len(registry.list_blocks())
    assert registry.get_block("missing") is None
