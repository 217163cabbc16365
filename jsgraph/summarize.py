from __future__ import annotations

from collections import Counter
from typing import List

from .model import FileGraph, FileNode, SymbolGraph


def summarize_node(node: FileNode) -> str:
	parts: List[str] = []
	parts.append(f"File {node.id} ({node.lines} lines, {node.incoming_count} incoming)")
	if node.exports:
		parts.append(f"  Exports: {', '.join(e.name for e in node.exports[:10])}")
	return "\n".join(parts)


def summarize_file_graph(graph: FileGraph) -> str:
	return (
		f"Found {len(graph.nodes)} files, {len(graph.edges)} connections "
		f"across {len(graph.folders)} folders"
	)


def summarize_symbol_graph(graph: SymbolGraph) -> str:
	kinds = Counter(s.kind for s in graph.symbols)
	by_kind = ", ".join(f"{count} {kind}" for kind, count in sorted(kinds.items()))
	conditional = len([e for e in graph.edges if e.conditions])
	summary = (
		f"Found {len(graph.symbols)} symbols in {len(graph.files)} files, "
		f"{len(graph.edges)} edges ({conditional} conditional)"
	)
	if by_kind:
		summary += f": {by_kind}"
	return summary


def most_referenced(graph: FileGraph, limit: int = 10) -> List[FileNode]:
	return sorted(graph.nodes, key=lambda n: (-n.incoming_count, n.id))[:limit]
