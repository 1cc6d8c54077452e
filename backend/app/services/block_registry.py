from __future__ import annotations

from collections import defaultdict

from backend.app.models.block import (
    BlockSpec,
    FieldKind,
    FieldOption,
    FieldSpec,
    Precedence,
    ScopeRole,
    StatementInputSpec,
    ValueInputSpec,
)
from backend.app.services.codegen_errors import UnknownKind

MUSIC_CHECK = ["Music"]

DRUM_SAMPLES = [
    ("Kick", ":drum_bass_soft"),
    ("Snare", ":drum_snare_soft"),
    ("Low Tom", ":drum_tom_lo_soft"),
    ("High Tom", ":drum_tom_hi_soft"),
    ("Splash", ":drum_splash_soft"),
    ("Cymbal", ":drum_cymbal_soft"),
    ("Open Hi-Hat", ":drum_cymbal_open"),
    ("Closed Hi-Hat", ":drum_cymbal_closed"),
]
SYNTHS = [
    ("Sine", ":sine"),
    ("Square", ":square"),
    ("Saw", ":saw"),
    ("Pretty Bell", ":pretty_bell"),
    ("Bass", ":mod_fm"),
    ("Dark Ambience", ":dark_ambience"),
    ("dsaw", ":dsaw"),
    ("Dull bell", ":dull_bell"),
    ("Fm", ":fm"),
    ("Growl", ":growl"),
    ("Hollow", ":hollow"),
    ("Prophet", ":prophet"),
    ("Tri", ":tri"),
    ("Zawa", ":zawa"),
    ("Tb303", ":tb303"),
]
EFFECTS = [
    ("echo", ":echo"),
    ("flanger", ":flanger"),
    ("distortion", ":distortion"),
    ("reverb", ":reverb"),
    ("slicer", ":slicer"),
    ("wobble", ":wobble"),
]
BEAT_MARKERS = [
    ("downbeat", ":down_beat"),
    ("upbeat", ":up_beat"),
    ("beat 1", ":beat1"),
    ("beat 2", ":beat2"),
    ("beat 3", ":beat3"),
    ("beat 4", ":beat4"),
]
KEYS = [(key, key) for key in ("A", "B", "Bb", "C", "D", "E", "F", "G")]
ARITHMETIC_OPERATORS = [
    ("+", "ADD"),
    ("-", "MINUS"),
    ("×", "MULTIPLY"),
    ("÷", "DIVIDE"),
    ("^", "POWER"),
]


def _dropdown(name: str, options: list[tuple[str, str]], default: str | None = None) -> FieldSpec:
    return FieldSpec(
        name=name,
        kind=FieldKind.DROPDOWN,
        options=[FieldOption(label=label, token=token) for label, token in options],
        default=default,
    )


def _note_inputs() -> list[ValueInputSpec]:
    return [ValueInputSpec(name=f"Note{index}", check=["String"], required=False) for index in range(1, 5)]


class BlockRegistry:
    """Static catalogue of every block kind the code generator understands."""

    def __init__(self) -> None:
        self._blocks = {block.kind: block for block in self._load_builtin_blocks()}

    def list_blocks(self, category: str | None = None) -> list[BlockSpec]:
        blocks = list(self._blocks.values())
        if category:
            blocks = [block for block in blocks if block.category == category]
        return sorted(blocks, key=lambda item: (item.category, item.kind))

    def get_block(self, kind: str) -> BlockSpec | None:
        return self._blocks.get(kind)

    def lookup(self, kind: str, *, node_id: str | None = None) -> BlockSpec:
        block = self._blocks.get(kind)
        if block is None:
            raise UnknownKind(node_id, kind)
        return block

    def kinds(self) -> frozenset[str]:
        return frozenset(self._blocks)

    def categories(self) -> dict[str, int]:
        counters: dict[str, int] = defaultdict(int)
        for block in self._blocks.values():
            counters[block.category] += 1
        return dict(sorted(counters.items(), key=lambda kv: kv[0]))

    @staticmethod
    def _statement(**kwargs: object) -> BlockSpec:
        kwargs.setdefault("previous_statement", True)
        kwargs.setdefault("next_statement", True)
        return BlockSpec(**kwargs)

    @staticmethod
    def _value(**kwargs: object) -> BlockSpec:
        kwargs.setdefault("precedence", Precedence.ATOMIC)
        return BlockSpec(**kwargs)

    def _load_builtin_blocks(self) -> list[BlockSpec]:
        return [
            self._statement(
                kind="defmotif",
                category="motif",
                description="Define a named motif; the definition is hoisted above the program body.",
                inputs=[ValueInputSpec(name="NAME", check=["String"], label="Create the motif:")],
                statement_inputs=[StatementInputSpec(name="DO", check=MUSIC_CHECK, label="as:")],
                scope=ScopeRole.MOTIF,
                tags=["scope", "definition"],
            ),
            self._statement(
                kind="play_synth",
                category="music",
                description="Play one note or a chord for a number of beats.",
                inputs=[
                    ValueInputSpec(name="NOTES", check=["String", "Array", "Number"], label="play"),
                    ValueInputSpec(name="BEATS", check=["Number"], label="for"),
                ],
                tags=["sound"],
            ),
            self._statement(
                kind="trigger_drum",
                category="music",
                description="Trigger a drum sample, hard or soft.",
                fields=[
                    _dropdown("SAMPLE", DRUM_SAMPLES),
                    _dropdown("STYLE", [("hard", "hard"), ("soft", "soft")]),
                ],
                tags=["sound"],
            ),
            self._statement(
                kind="rest",
                category="music",
                description="Stay silent for an amount of beats or measures.",
                inputs=[ValueInputSpec(name="AMOUNT", check=["Number"], label="rest for")],
                fields=[_dropdown("UNITS", [("beats", ":beats"), ("measures", ":measures")])],
                tags=["timing"],
            ),
            self._statement(
                kind="wait_for",
                category="music",
                description="Block until the next matching beat of the shared clock.",
                fields=[_dropdown("UNITS", BEAT_MARKERS)],
                tags=["timing"],
            ),
            self._statement(
                kind="set_volume",
                category="actions",
                description="Set the playback volume.",
                inputs=[ValueInputSpec(name="VOLUME", check=["Number"], label="set volume to")],
            ),
            self._statement(
                kind="set_tempo",
                category="actions",
                description="Set the tempo in beats per minute.",
                inputs=[ValueInputSpec(name="TEMPO", check=["Number"], label="set tempo to")],
            ),
            self._statement(
                kind="stop_sound",
                category="actions",
                description="Stop every sound currently playing.",
            ),
            self._statement(
                kind="cue",
                category="actions",
                description="Play a motif once.",
                inputs=[ValueInputSpec(name="MOTIF", check=["String"], label="cue motif:")],
            ),
            self._statement(
                kind="loop",
                category="actions",
                description="Play a motif repeatedly.",
                inputs=[ValueInputSpec(name="MOTIF", check=["String"], label="loop motif:")],
            ),
            self._statement(
                kind="sync_to_parent",
                category="actions",
                description="Follow the beat clock of another unit.",
                inputs=[ValueInputSpec(name="PARENT", check=["String"], label="sync to BTU")],
            ),
            self._statement(
                kind="set_synth",
                category="actions",
                description="Change the synth instrument.",
                fields=[_dropdown("SYNTH", SYNTHS)],
            ),
            self._statement(
                kind="play_chord_progression",
                category="music",
                description="Play the contained chord blocks in order.",
                fields=[FieldSpec(name="NAME", kind=FieldKind.TEXT, default="prog")],
                statement_inputs=[StatementInputSpec(name="DO")],
                scope=ScopeRole.MUSIC,
                tags=["scope"],
            ),
            self._statement(
                kind="play_in_key",
                category="music",
                description="Play the contained blocks in a key and mode.",
                fields=[
                    _dropdown("KEY", KEYS),
                    _dropdown("MODE", [("Major", "Major"), ("Minor", "Minor")]),
                ],
                statement_inputs=[StatementInputSpec(name="DO")],
                scope=ScopeRole.MUSIC,
                tags=["scope"],
            ),
            self._statement(
                kind="with_fx",
                category="music",
                description="Apply an effect to the contained blocks.",
                fields=[_dropdown("EFFECT", EFFECTS)],
                statement_inputs=[StatementInputSpec(name="COMMANDS", check=MUSIC_CHECK)],
                scope=ScopeRole.MUSIC,
                tags=["scope", "effect"],
            ),
            self._statement(
                kind="trigger_sample",
                category="music",
                description="Play an uploaded wav sample.",
                fields=[FieldSpec(name="NAME", kind=FieldKind.TEXT, default="no file selected")],
                tags=["sound"],
            ),
            self._value(
                kind="chord",
                category="notes",
                description="Up to four notes sounding together.",
                inputs=_note_inputs(),
                output=["Array"],
            ),
            self._value(
                kind="premade_chord",
                category="notes",
                description="A named chord of up to four notes.",
                inputs=_note_inputs(),
                fields=[FieldSpec(name="NAME", kind=FieldKind.TEXT, default="Premade Chord:")],
                output=["Array"],
            ),
            self._value(
                kind="text",
                category="values",
                description="A string literal.",
                fields=[FieldSpec(name="TEXT", kind=FieldKind.TEXT, default="")],
                output=["String"],
            ),
            self._value(
                kind="math_number",
                category="values",
                description="A number literal.",
                fields=[FieldSpec(name="NUM", kind=FieldKind.NUMBER, default=0)],
                output=["Number"],
            ),
            self._value(
                kind="logic_boolean",
                category="values",
                description="true or false.",
                fields=[_dropdown("BOOL", [("true", "TRUE"), ("false", "FALSE")])],
                output=["Boolean"],
            ),
            self._value(
                kind="math_arithmetic",
                category="values",
                description="Arithmetic on two numbers.",
                inputs=[
                    ValueInputSpec(name="A", check=["Number"]),
                    ValueInputSpec(name="B", check=["Number"]),
                ],
                fields=[_dropdown("OP", ARITHMETIC_OPERATORS)],
                output=["Number"],
                precedence=Precedence.ADDITIVE,
            ),
            self._value(
                kind="text_join",
                category="values",
                description="Concatenate two strings.",
                inputs=[
                    ValueInputSpec(name="A", check=["String"], default=""),
                    ValueInputSpec(name="B", check=["String"], default=""),
                ],
                output=["String"],
                precedence=Precedence.CONCATENATION,
            ),
        ]
