"""Static dependency and call graphs for JavaScript / TypeScript codebases.

Modules:
- fs_scan.py: Source file discovery with ignore-directory pruning.
- ast_parse.py: Tree-sitter parsing and the node-type dispatching walker.
- resolve.py: Relative import specifier resolution.
- extract.py: Export, import, declaration and reference extraction.
- filegraph.py: File-level dependency graph.
- symbols.py: Symbol and call-site extraction.
- callgraph.py: Cross-file symbol graph.
- model.py: Data structures for facts and graphs.
- context.py: Per-run file and parse caches, root validation.
- config.py: Environment-driven settings.
- logging_config.py: Console logging setup.
- summarize.py: Short textual summaries of graphs.
"""

from .callgraph import build_symbol_graph
from .context import AnalysisError, PathEscapeError, read_source
from .filegraph import build_file_graph
from .model import FileGraph, SymbolGraph


def analyze_codebase(root: str) -> FileGraph:
	return build_file_graph(root)


def analyze_symbols(root: str) -> SymbolGraph:
	return build_symbol_graph(root)


__all__ = [
	"AnalysisError",
	"PathEscapeError",
	"analyze_codebase",
	"analyze_symbols",
	"read_source",
]
