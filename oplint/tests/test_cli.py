from __future__ import annotations

import json
from pathlib import Path

from oplint.cli import main

TESTDATA = Path(__file__).with_name("testdata")


def test_clean_file_exits_zero(tmp_path: Path, capsys) -> None:
    src = tmp_path / "ok.go"
    src.write_text('package p\n\nfunc f() error {\n\tconst op = "p/f"\n\treturn nil\n}\n')
    assert main([str(src), "--missing", "-v"]) == 0
    err = capsys.readouterr().err
    assert f"[ok] {src}" in err


def test_text_diagnostics_on_stderr(capsys) -> None:
    rc = main([str(TESTDATA / "methods.go")])
    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    lines = captured.err.strip().splitlines()
    assert len(lines) == 2
    assert lines[0] == (
        f"{TESTDATA / 'methods.go'}:11:8: warning: "
        "op constant value (testdata/helloWorld.Doh) does not match function name (testdata/helloWorld.Do)"
    )


def test_missing_flag_enables_missing_rule(capsys) -> None:
    main([str(TESTDATA / "basic.go")])
    without = capsys.readouterr().err
    main([str(TESTDATA / "basic.go"), "--missing"])
    with_missing = capsys.readouterr().err
    assert "does not define an op constant" not in without
    assert "testdata/hello returns an error but does not define an op constant" in with_missing


def test_json_payload(capsys) -> None:
    rc = main([str(TESTDATA / "basic.go"), "--missing", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert payload["exit_code"] == 1
    assert [d["code"] for d in payload["diagnostics"]] == ["E-OP-MISSING", "E-OP-MISMATCH"]
    first = payload["diagnostics"][0]
    assert set(first) == {"code", "message", "severity", "file", "line", "column", "notes"}
    assert (first["line"], first["column"], first["severity"]) == (8, 1, "warning")


def test_package_flag(tmp_path: Path, capsys) -> None:
    src = tmp_path / "x.go"
    src.write_text('package x\nfunc f() {\n\tconst op = "example.com/x/f"\n}\n')
    assert main([str(src)]) == 1
    assert main([str(src), "--package", "example.com/x"]) == 0


def test_no_go_files(tmp_path: Path, capsys) -> None:
    assert main([str(tmp_path)]) == 1
    assert "no .go files found" in capsys.readouterr().err
