from __future__ import annotations

import json
from pathlib import Path

import pytest

from backend.app.cli import main


def _write_graph(tmp_path: Path, nodes: list[dict]) -> Path:
    path = tmp_path / "program.json"
    path.write_text(json.dumps({"nodes": nodes}), encoding="utf-8")
    return path


def test_cli_writes_program_to_stdout(tmp_path: Path, capsys) -> None:
    path = _write_graph(
        tmp_path,
        [
            {"id": "tempo", "kind": "set_tempo", "inputs": {"TEMPO": {"literal": 96}}, "next": "stop"},
            {"id": "stop", "kind": "stop_sound"},
        ],
    )

    main([str(path)])

    assert capsys.readouterr().out == "set_tempo(96)\nstop_sound()\n"


def test_cli_writes_output_file_and_reports_degradation(tmp_path: Path, capsys) -> None:
    path = _write_graph(tmp_path, [{"id": "rest", "kind": "rest"}])
    output = tmp_path / "out.exs"

    main([str(path), "-o", str(output), "--root", "rest"])

    assert output.read_text(encoding="utf-8") == "rest(, :beats)\n"
    assert "warning:" in capsys.readouterr().err


def test_cli_strict_mode_fails_on_degraded_output(tmp_path: Path) -> None:
    path = _write_graph(tmp_path, [{"id": "rest", "kind": "rest"}])

    with pytest.raises(SystemExit) as exc_info:
        main([str(path), "--strict"])

    assert exc_info.value.code == 2


def test_cli_exits_on_compile_error(tmp_path: Path, capsys) -> None:
    path = _write_graph(tmp_path, [{"id": "a", "kind": "stop_sound", "next": "missing"}])

    with pytest.raises(SystemExit) as exc_info:
        main([str(path)])

    assert exc_info.value.code == 1
    assert "missing" in capsys.readouterr().err


def test_cli_lists_blocks(capsys) -> None:
    main(["--list-blocks"])

    out = capsys.readouterr().out
    assert "defmotif" in out
    assert "math_arithmetic" in out
