"""
Expectation-comment harness for fixture directories.

A fixture line may carry a comment of the form

    const op = "x" // want `op constant value \(x\) does not match`

Each quoted pattern (backquoted, or double-quoted) is a regular expression
that one diagnostic reported on that line must match. `check` returns a list
of human-readable problems; an empty list means every diagnostic was expected
and every expectation was met.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Pattern

from .analyzer import Config, analyze_paths, collect_files

_WANT_RE = re.compile(r"//\s*want\b\s*(.*)$")
_PATTERN_RE = re.compile(r'`([^`]*)`|"((?:[^"\\]|\\.)*)"')


def expectations(source: str) -> Dict[int, List[Pattern[str]]]:
    found: Dict[int, List[Pattern[str]]] = {}
    for lineno, line in enumerate(source.splitlines(), 1):
        match = _WANT_RE.search(line)
        if match is None:
            continue
        patterns = []
        for raw, quoted in _PATTERN_RE.findall(match.group(1)):
            text = raw if raw else re.sub(r'\\(["\\])', r"\1", quoted)
            patterns.append(re.compile(text))
        if not patterns:
            raise ValueError(f"line {lineno}: `want` comment without a pattern")
        found.setdefault(lineno, []).extend(patterns)
    return found


def check(directory: str | Path, config: Config) -> List[str]:
    files = collect_files([directory])
    wanted: Dict[str, Dict[int, List[Pattern[str]]]] = {}
    for path in files:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            # the driver reports the file as E-READ; nothing can be expected of it
            source = ""
        wanted[str(path)] = expectations(source)

    problems: List[str] = []
    for diag in analyze_paths(files, config):
        file = diag.span.file or ""
        line = diag.span.line or 0
        pending = wanted.get(file, {}).get(line, [])
        for idx, pattern in enumerate(pending):
            if pattern.search(diag.message):
                del pending[idx]
                break
        else:
            problems.append(f"{file}:{line}: unexpected diagnostic: {diag.message}")

    for file, by_line in sorted(wanted.items()):
        for line, pending in sorted(by_line.items()):
            for pattern in pending:
                problems.append(f"{file}:{line}: no diagnostic was reported matching `{pattern.pattern}`")
    return problems
