"""Per-run analysis state.

An ``AnalysisContext`` is created for every analysis call and owns the file
bytes and parse results of that run only. Nothing is shared between runs.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

from .ast_parse import ParseResult, parse_source
from .resolve import is_within, resolve_import


class AnalysisError(Exception):
    """The analysis root cannot be used (missing, not a directory)."""


class PathEscapeError(AnalysisError):
    """A requested path resolves outside the analysis root."""


def validate_root(root: str) -> str:
    root = os.path.abspath(root)
    if not os.path.exists(root):
        raise AnalysisError(f"Path does not exist: {root}")
    if not os.path.isdir(root):
        raise AnalysisError(f"Path is not a directory: {root}")
    return root


def read_source(root: str, rel_path: str) -> str:
    """Return the raw text of one file inside *root*."""
    root = validate_root(root)
    full_path = os.path.realpath(os.path.join(root, rel_path))
    if not is_within(os.path.realpath(root), full_path):
        raise PathEscapeError(f"Path escapes the analysis root: {rel_path}")
    with open(full_path, "r", encoding="utf-8", errors="replace") as fh:
        return fh.read()


class AnalysisContext:
    def __init__(self, root: str) -> None:
        self.root = validate_root(root)
        self._data: Dict[str, bytes] = {}
        self._parsed: Dict[str, ParseResult] = {}

    def abspath(self, rel_path: str) -> str:
        return os.path.join(self.root, rel_path)

    def read_bytes(self, rel_path: str) -> bytes:
        data = self._data.get(rel_path)
        if data is None:
            with open(self.abspath(rel_path), "rb") as fh:
                data = fh.read()
            self._data[rel_path] = data
        return data

    def read_text(self, rel_path: str) -> str:
        return self.read_bytes(rel_path).decode("utf-8", errors="replace")

    def parse(self, rel_path: str) -> ParseResult:
        result = self._parsed.get(rel_path)
        if result is None:
            result = parse_source(rel_path, self.read_bytes(rel_path))
            self._parsed[rel_path] = result
        return result

    def resolve(self, specifier: str, rel_path: str) -> Optional[str]:
        return resolve_import(specifier, self.abspath(rel_path), self.root)
