from __future__ import annotations

import re

import pytest

from backend.app.services.literals import render_literal, render_number, render_string


_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}


def _unquote(token: str) -> str:
    assert token.startswith('"') and token.endswith('"')
    return re.sub(r"\\(.)", lambda match: _ESCAPES[match.group(1)], token[1:-1])


def test_float_keeps_decimal_point() -> None:
    assert render_number(2.0) == "2.0"
    assert render_number(0.1) == "0.1"
    assert render_number(-3.25) == "-3.25"


def test_integer_has_no_fractional_part() -> None:
    assert render_number(2) == "2"
    assert render_number(-40) == "-40"


def test_exponent_form_still_contains_decimal_point() -> None:
    assert render_number(1e20) == "1.0e20"
    assert render_number(1.5e-07) == "1.5e-7"


def test_non_finite_numbers_are_rejected() -> None:
    with pytest.raises(ValueError):
        render_number(float("nan"))


def test_string_round_trips_through_trivial_tokenizer() -> None:
    assert render_string("hi") == '"hi"'
    assert _unquote(render_string("hi")) == "hi"

    tricky = 'say "hi" \\ now'
    assert _unquote(render_string(tricky)) == tricky


def test_string_control_characters_are_escaped_onto_one_line() -> None:
    text = "verse\nchorus\r\n\tbridge\\n"
    rendered = render_string(text)

    assert rendered == '"verse\\nchorus\\r\\n\\tbridge\\\\n"'
    assert "\n" not in rendered
    assert _unquote(rendered) == text


def test_booleans_and_lists() -> None:
    assert render_literal(True) == "true"
    assert render_literal(False) == "false"
    assert render_literal(["C4", "E4", 2, 0.5]) == '["C4","E4",2,0.5]'
    assert render_literal([]) == "[]"
