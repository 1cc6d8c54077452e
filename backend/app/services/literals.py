from __future__ import annotations

import math

from backend.app.models.block import LiteralValue

BOOLEAN_TOKENS = {True: "true", False: "false"}
STRING_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"})


def render_string(value: str) -> str:
    # Control characters are escaped so a literal never spans lines and survives re-indentation.
    return f'"{value.translate(STRING_ESCAPES)}"'


def render_number(value: int | float) -> str:
    if isinstance(value, bool):
        return BOOLEAN_TOKENS[value]
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot render non-finite number '{value}'")

    # repr() is the shortest round-trip form; it only drops the point in exponent notation.
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        if "." not in mantissa:
            mantissa = f"{mantissa}.0"
        return f"{mantissa}e{int(exponent)}"
    return text


def render_list(values: list) -> str:
    return "[" + ",".join(render_literal(value) for value in values) + "]"


def render_literal(value: LiteralValue) -> str:
    if isinstance(value, bool):
        return BOOLEAN_TOKENS[value]
    if isinstance(value, (int, float)):
        return render_number(value)
    if isinstance(value, str):
        return render_string(value)
    if isinstance(value, list):
        return render_list(value)
    raise ValueError(f"Unsupported literal value '{value}'")
