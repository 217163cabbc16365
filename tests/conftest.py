"""Shared fixtures: small on-disk JS/TS trees and parsed modules."""

from pathlib import Path
from textwrap import dedent
from typing import Callable, Dict

import pytest

from jsgraph.ast_parse import ParsedModule, parse_source


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: source}`` under a temporary root and return it."""

    def _make(files: Dict[str, str]) -> Path:
        for rel_path, content in files.items():
            target = tmp_path / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(dedent(content), encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def parse_js() -> Callable[..., ParsedModule]:
    def _parse(source: str, path: str = "mod.js") -> ParsedModule:
        result = parse_source(path, dedent(source).encode("utf-8"))
        assert isinstance(result, ParsedModule), getattr(result, "reason", result)
        return result

    return _parse


@pytest.fixture
def sample_app_path() -> Path:
    return Path(__file__).parent / "fixtures" / "sample_app"
