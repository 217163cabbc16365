"""File-level dependency graph.

Analysis runs in two passes. The first records every file (size, lines,
exports, script references); the second resolves imports, which needs the
full set of scanned files to be known.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Dict, Iterable, List, Tuple

from .ast_parse import Unparseable
from .context import AnalysisContext
from .extract import (
    extract_declarations,
    extract_exports,
    extract_imports,
    extract_references,
    extract_script_refs,
)
from .fs_scan import file_extension, scan_sources
from .model import Export, FileEdge, FileGraph, FileNode, FileRecord, Import

logger = logging.getLogger(__name__)

SCRIPT_SRC_REFERENCE = "script-src"


def count_lines(data: bytes) -> int:
    return data.count(b"\n") + 1


class FileStrategy:
    """How one kind of file contributes facts to the two analysis passes."""

    def first_pass(self, ctx: AnalysisContext, rel_path: str) -> FileRecord:
        raise NotImplementedError

    def second_pass(self, ctx: AnalysisContext, record: FileRecord) -> FileRecord:
        return record


class ModuleStrategy(FileStrategy):
    def first_pass(self, ctx: AnalysisContext, rel_path: str) -> FileRecord:
        data = ctx.read_bytes(rel_path)
        parsed = ctx.parse(rel_path)
        if isinstance(parsed, Unparseable):
            return FileRecord(path=rel_path, size=len(data), lines=count_lines(data), parsed=False)
        return FileRecord(
            path=rel_path,
            size=len(data),
            lines=count_lines(data),
            exports=extract_exports(parsed),
        )

    def second_pass(self, ctx: AnalysisContext, record: FileRecord) -> FileRecord:
        parsed = ctx.parse(record.path)
        if isinstance(parsed, Unparseable):
            return record
        return record.model_copy(update={
            "imports": extract_imports(parsed, ctx.abspath(record.path), ctx.root),
            "declarations": extract_declarations(parsed),
            "references": sorted(extract_references(parsed)),
        })


class HtmlStrategy(FileStrategy):
    def first_pass(self, ctx: AnalysisContext, rel_path: str) -> FileRecord:
        data = ctx.read_bytes(rel_path)
        return FileRecord(
            path=rel_path,
            size=len(data),
            lines=count_lines(data),
            script_refs=extract_script_refs(ctx.read_text(rel_path), ctx.abspath(rel_path), ctx.root),
        )


MODULE_STRATEGY = ModuleStrategy()
HTML_STRATEGY = HtmlStrategy()

STRATEGIES: Dict[str, FileStrategy] = {
    ".js": MODULE_STRATEGY,
    ".jsx": MODULE_STRATEGY,
    ".ts": MODULE_STRATEGY,
    ".tsx": MODULE_STRATEGY,
    ".mjs": MODULE_STRATEGY,
    ".cjs": MODULE_STRATEGY,
    ".html": HTML_STRATEGY,
    ".htm": HTML_STRATEGY,
}


def strategy_for(path: str) -> FileStrategy:
    return STRATEGIES.get(file_extension(path), MODULE_STRATEGY)


def canonical_pair(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


class FileGraphBuilder:
    """Accumulates file edges keyed by canonical pair.

    Weights are plain sums, so the order facts are added in does not
    change the result.
    """

    def __init__(self, known_files: Iterable[str]) -> None:
        self.known = set(known_files)
        self._edges: Dict[Tuple[str, str], FileEdge] = {}
        self._incoming: Dict[str, int] = {}

    def add_import(self, from_file: str, imp: Import) -> None:
        if imp.resolved is None:
            return
        self._incoming[imp.resolved] = self._incoming.get(imp.resolved, 0) + 1
        if imp.resolved not in self.known:
            return
        self._accumulate(from_file, imp.resolved, len(imp.specifiers), [s.name for s in imp.specifiers])

    def add_script_ref(self, html_file: str, script_file: str) -> None:
        if script_file not in self.known:
            return
        self._accumulate(html_file, script_file, 1, [SCRIPT_SRC_REFERENCE])

    def _accumulate(self, a: str, b: str, weight: int, references: List[str]) -> None:
        if a == b:
            return
        key = canonical_pair(a, b)
        edge = self._edges.get(key)
        if edge is None:
            edge = FileEdge(source=key[0], target=key[1])
            self._edges[key] = edge
        edge.weight += weight
        edge.references.extend(references)

    def incoming_count(self, path: str) -> int:
        return self._incoming.get(path, 0)

    def edges(self) -> List[FileEdge]:
        # pairs linked only by side-effect imports carry no specifiers
        return [edge for _, edge in sorted(self._edges.items()) if edge.weight > 0]


def merged_exports(record: FileRecord) -> List[Export]:
    exports = list(record.exports)
    names = {e.name for e in exports}
    for decl in record.declarations:
        if decl.name not in names:
            exports.append(Export(name=decl.name, kind=decl.kind))
            names.add(decl.name)
    return exports


def assemble_file_graph(records: Iterable[FileRecord]) -> FileGraph:
    """Build the graph from finished per-file records."""
    records = sorted(records, key=lambda r: r.path)
    builder = FileGraphBuilder(r.path for r in records)
    for record in records:
        for imp in record.imports:
            builder.add_import(record.path, imp)
        for script_file in record.script_refs:
            builder.add_script_ref(record.path, script_file)

    nodes = [
        FileNode(
            id=record.path,
            exports=merged_exports(record),
            lines=record.lines,
            folder=posixpath.dirname(record.path) or ".",
            extension=posixpath.splitext(record.path)[1],
            incoming_count=builder.incoming_count(record.path),
        )
        for record in records
    ]
    return FileGraph(
        nodes=nodes,
        edges=builder.edges(),
        folders=sorted({n.folder for n in nodes}),
        extensions=sorted({n.extension for n in nodes}),
    )


def collect_file_records(ctx: AnalysisContext) -> List[FileRecord]:
    files = scan_sources(ctx.root, include_html=True)
    records: Dict[str, FileRecord] = {}
    for rel_path in files:
        records[rel_path] = strategy_for(rel_path).first_pass(ctx, rel_path)
    for rel_path in files:
        records[rel_path] = strategy_for(rel_path).second_pass(ctx, records[rel_path])
    unparsed = [r.path for r in records.values() if not r.parsed]
    if unparsed:
        logger.debug("%d files could not be parsed: %s", len(unparsed), ", ".join(unparsed))
    return list(records.values())


def build_file_graph(root: str) -> FileGraph:
    """Scan *root* and return its file dependency graph."""
    ctx = AnalysisContext(root)
    graph = assemble_file_graph(collect_file_records(ctx))
    logger.info("File graph for %s: %d files, %d edges", ctx.root, len(graph.nodes), len(graph.edges))
    return graph
