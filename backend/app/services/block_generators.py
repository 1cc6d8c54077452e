from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from backend.app.models.block import BlockSpec, FieldKind, Precedence
from backend.app.models.program import BlockNode
from backend.app.services.generation_context import GenerationContext
from backend.app.services.literals import BOOLEAN_TOKENS, render_number, render_string

INFIX_OPERATORS: dict[str, tuple[str, Precedence]] = {
    "ADD": ("+", Precedence.ADDITIVE),
    "MINUS": ("-", Precedence.ADDITIVE),
    "MULTIPLY": ("*", Precedence.MULTIPLICATIVE),
    "DIVIDE": ("/", Precedence.MULTIPLICATIVE),
}


@dataclass(frozen=True, slots=True)
class Fragment:
    text: str
    tier: int = Precedence.ATOMIC


EMPTY_FRAGMENT = Fragment("", Precedence.ATOMIC)


def parenthesize(fragment: Fragment, consumer_tier: int) -> Fragment:
    if fragment.text and fragment.tier > consumer_tier:
        return Fragment(f"({fragment.text})", Precedence.ATOMIC)
    return fragment


def indent_lines(text: str, unit: str) -> str:
    return "".join(f"{unit}{line}" if line.strip() else line for line in text.splitlines(keepends=True))


@dataclass(slots=True)
class BlockArguments:
    """Everything a generator may read for one node, with inputs already resolved."""

    node: BlockNode
    spec: BlockSpec
    context: GenerationContext
    indent_unit: str
    values: dict[str, Fragment] = field(default_factory=dict)
    bodies: dict[str, str] = field(default_factory=dict)

    def value(self, slot: str, consumer_tier: int = Precedence.NONE) -> str:
        return parenthesize(self.values.get(slot, EMPTY_FRAGMENT), consumer_tier).text

    def statements(self, slot: str) -> str:
        return indent_lines(self.bodies.get(slot, ""), self.indent_unit)

    def inline_statements(self, slot: str) -> str:
        return self.bodies.get(slot, "")

    def field_value(self, name: str) -> object:
        if name in self.node.fields:
            return self.node.fields[name]
        spec = self.spec.find_field(name)
        return spec.default if spec is not None else None

    def text(self, name: str) -> str:
        value = self.field_value(name)
        if value is None:
            return ""
        if isinstance(value, bool):
            return BOOLEAN_TOKENS[value]
        return str(value)

    def token(self, name: str) -> str:
        spec = self.spec.find_field(name)
        if spec is None or spec.kind != FieldKind.DROPDOWN:
            return self.text(name)
        raw = self.node.fields.get(name)
        token = spec.token_for(raw)
        if token is not None:
            return token
        fallback = spec.default_token or ""
        if raw is not None:
            self.context.degrade(
                f"Node '{self.node.id}' ({self.node.kind}) field '{name}' has unknown option {raw!r}; "
                f"using {fallback!r}."
            )
        return fallback

    def number(self, name: str) -> str:
        raw = self.field_value(name)
        if isinstance(raw, str):
            text = raw.strip()
            if re.fullmatch(r"[-+]?\d+", text):
                raw = int(text)
            elif re.fullmatch(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?", text):
                raw = float(text)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return render_number(raw)
        self.context.degrade(f"Node '{self.node.id}' ({self.node.kind}) field '{name}' is not a number; using 0.")
        return "0"


Generator = Callable[[BlockArguments], "str | Fragment"]


def _call(name: str, *args: str) -> str:
    return f"{name}({', '.join(args)})"


def _do_block(header: str, body: str) -> str:
    return f"{header} do\n{body}end"


def _defmotif(block: BlockArguments) -> str:
    return _do_block(f"defmotif {block.value('NAME', Precedence.ATOMIC)}", block.statements("DO"))


def _play_synth(block: BlockArguments) -> str:
    return _call("play_synth", block.value("NOTES"), block.value("BEATS"))


def _trigger_drum(block: BlockArguments) -> str:
    sample = block.token("SAMPLE").replace("soft", block.token("STYLE"))
    return _call("trigger_sample", sample)


def _rest(block: BlockArguments) -> str:
    return _call("rest", block.value("AMOUNT"), block.token("UNITS"))


def _wait_for(block: BlockArguments) -> str:
    return _call("wait_for", block.token("UNITS"))


def _set_volume(block: BlockArguments) -> str:
    return _call("set_volume", block.value("VOLUME"))


def _set_tempo(block: BlockArguments) -> str:
    return _call("set_tempo", block.value("TEMPO"))


def _stop_sound(block: BlockArguments) -> str:
    return _call("stop_sound")


def _cue(block: BlockArguments) -> str:
    return _call("cue", block.value("MOTIF"))


def _loop(block: BlockArguments) -> str:
    return _call("loop", block.value("MOTIF"))


def _sync_to_parent(block: BlockArguments) -> str:
    return _call("sync_to", block.value("PARENT"))


def _set_synth(block: BlockArguments) -> str:
    return _call("set_synth", block.token("SYNTH"))


def _play_chord_progression(block: BlockArguments) -> str:
    # The progression has no wrapper in the target language; its chords run in place.
    return block.inline_statements("DO").rstrip("\n")


def _play_in_key(block: BlockArguments) -> str:
    header = _call("play_in_key", render_string(block.token("KEY")), render_string(block.token("MODE")))
    return _do_block(header, block.statements("DO"))


def _with_fx(block: BlockArguments) -> str:
    return _do_block(_call("with_fx", block.token("EFFECT")), block.statements("COMMANDS"))


def _trigger_sample(block: BlockArguments) -> str:
    return _call("trigger_sample", render_string(block.text("NAME")))


def _chord(block: BlockArguments) -> Fragment:
    notes = [block.value(item.name) for item in block.spec.inputs]
    return Fragment("[" + ",".join(note for note in notes if note) + "]", Precedence.ATOMIC)


def _text(block: BlockArguments) -> Fragment:
    return Fragment(render_string(block.text("TEXT")), Precedence.ATOMIC)


def _math_number(block: BlockArguments) -> Fragment:
    return Fragment(block.number("NUM"), Precedence.ATOMIC)


def _logic_boolean(block: BlockArguments) -> Fragment:
    return Fragment("true" if block.token("BOOL") == "TRUE" else "false", Precedence.ATOMIC)


def _math_arithmetic(block: BlockArguments) -> Fragment:
    operator = block.token("OP")
    if operator == "POWER":
        text = _call(":math.pow", block.value("A"), block.value("B"))
        return Fragment(text, Precedence.FUNCTION_CALL)

    symbol, tier = INFIX_OPERATORS[operator]
    # The right operand must bind strictly tighter so a - (b - c) keeps its parentheses.
    left = block.value("A", tier)
    right = block.value("B", tier - 1)
    return Fragment(f"{left} {symbol} {right}", tier)


def _text_join(block: BlockArguments) -> Fragment:
    left = block.value("A", Precedence.CONCATENATION)
    right = block.value("B", Precedence.CONCATENATION)
    return Fragment(f"{left} <> {right}", Precedence.CONCATENATION)


GENERATORS: dict[str, Generator] = {
    "defmotif": _defmotif,
    "play_synth": _play_synth,
    "trigger_drum": _trigger_drum,
    "rest": _rest,
    "wait_for": _wait_for,
    "set_volume": _set_volume,
    "set_tempo": _set_tempo,
    "stop_sound": _stop_sound,
    "cue": _cue,
    "loop": _loop,
    "sync_to_parent": _sync_to_parent,
    "set_synth": _set_synth,
    "play_chord_progression": _play_chord_progression,
    "play_in_key": _play_in_key,
    "with_fx": _with_fx,
    "trigger_sample": _trigger_sample,
    "chord": _chord,
    "premade_chord": _chord,
    "text": _text,
    "math_number": _math_number,
    "logic_boolean": _logic_boolean,
    "math_arithmetic": _math_arithmetic,
    "text_join": _text_join,
}
