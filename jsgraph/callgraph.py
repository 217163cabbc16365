"""Symbol-level call / import graph across files.

Calls are linked through an ordered list of resolvers. Each resolver
returns the target symbol ids it is confident about, or an empty list to
pass the call on to the next one:

1. ``resolve_same_file``: a symbol with the called name in the caller's file.
2. ``resolve_imported``: the callee (or its receiver) is an imported name.
3. ``resolve_same_file_method``: a method of that name in the same file.
4. ``resolve_any_method``: every method of that name in any file.

The last tier is deliberately permissive and can over-link common method
names such as ``render`` or ``update``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .ast_parse import Unparseable
from .context import AnalysisContext
from .extract import extract_imports
from .fs_scan import scan_sources
from .model import CallFact, Condition, Import, Symbol, SymbolEdge, SymbolGraph
from .symbols import extract_symbols, symbol_id

logger = logging.getLogger(__name__)


@dataclass
class FileSymbols:
    """Everything one file contributes to the symbol graph."""
    file: str
    symbols: List[Symbol] = field(default_factory=list)
    calls: List[CallFact] = field(default_factory=list)
    imports: List[Import] = field(default_factory=list)


@dataclass
class ImportBinding:
    local: str
    imported: str
    kind: str
    from_file: str


class SymbolIndex:
    """Lookups over all symbols of one analysis run."""

    def __init__(self, files: Iterable[FileSymbols]):
        self.by_id: Dict[str, Symbol] = {}
        self.by_file: Dict[str, Dict[str, str]] = {}
        self.imports: Dict[str, Dict[str, ImportBinding]] = {}
        self.methods: Dict[str, List[Symbol]] = {}

        for fs in files:
            names = self.by_file.setdefault(fs.file, {})
            for sym in fs.symbols:
                # a later declaration with the same id replaces the earlier one
                self.by_id[sym.id] = sym
                names[sym.name] = sym.id
            bindings = self.imports.setdefault(fs.file, {})
            for imp in fs.imports:
                if imp.resolved is None:
                    continue
                for spec in imp.specifiers:
                    bindings[spec.name] = ImportBinding(
                        local=spec.name,
                        imported=spec.imported,
                        kind=spec.kind,
                        from_file=imp.resolved,
                    )

        for sym in self.by_id.values():
            if sym.kind == "method":
                self.methods.setdefault(sym.name.rsplit(".", 1)[-1], []).append(sym)

    def lookup(self, file: str, name: str) -> Optional[str]:
        return self.by_file.get(file, {}).get(name)


Resolver = Callable[[SymbolIndex, str, CallFact], List[str]]


def resolve_same_file(index: SymbolIndex, file: str, call: CallFact) -> List[str]:
    target = index.lookup(file, call.callee)
    return [target] if target else []


def resolve_imported(index: SymbolIndex, file: str, call: CallFact) -> List[str]:
    bindings = index.imports.get(file, {})
    if call.object_name is not None and call.object_name in bindings:
        binding = bindings[call.object_name]
        if binding.kind == "namespace":
            names = [call.callee]
        else:
            names = [
                binding.imported,
                binding.local,
                f"{binding.imported}.{call.callee}",
                f"{binding.local}.{call.callee}",
            ]
    elif call.callee in bindings:
        # matched by name whatever the receiver, like resolve_same_file
        binding = bindings[call.callee]
        names = [binding.imported, binding.local]
    else:
        return []
    for name in names:
        target = index.lookup(binding.from_file, name)
        if target:
            return [target]
    return []


def _receiver_class(call: CallFact) -> Optional[str]:
    if call.object_name == "this":
        # methods are named Class.method, so the caller carries its class
        return call.caller.split(".", 1)[0] if "." in call.caller else None
    return call.object_name


def resolve_same_file_method(index: SymbolIndex, file: str, call: CallFact) -> List[str]:
    if not call.object_name:
        return []
    candidates = [s for s in index.methods.get(call.callee, []) if s.file == file]
    if not candidates:
        return []
    if len(candidates) == 1:
        return [candidates[0].id]
    owner = _receiver_class(call)
    for sym in candidates:
        if sym.name == f"{owner}.{call.callee}":
            return [sym.id]
    return [candidates[0].id]


def resolve_any_method(index: SymbolIndex, file: str, call: CallFact) -> List[str]:
    if not call.object_name:
        return []
    if index.lookup(file, call.object_name) or call.object_name in index.imports.get(file, {}):
        return []
    return [sym.id for sym in index.methods.get(call.callee, [])]


RESOLVERS: Tuple[Resolver, ...] = (
    resolve_same_file,
    resolve_imported,
    resolve_same_file_method,
    resolve_any_method,
)


def resolve_call(
    index: SymbolIndex,
    file: str,
    call: CallFact,
    resolvers: Sequence[Resolver] = RESOLVERS,
) -> List[str]:
    for resolver in resolvers:
        targets = resolver(index, file, call)
        if targets:
            return targets
    return []


class EdgeSet:
    """Symbol edges deduplicated by (source, target, kind).

    Re-adding an edge merges its condition into the set already recorded
    for it, keyed by (text, branch).
    """

    def __init__(self) -> None:
        self._edges: Dict[Tuple[str, str, str], Dict[Tuple[str, str], Condition]] = {}

    def add(self, source: str, target: str, kind: str, condition: Optional[Condition] = None) -> None:
        conditions = self._edges.setdefault((source, target, kind), {})
        if condition is not None:
            conditions.setdefault(condition.key(), condition)

    def __len__(self) -> int:
        return len(self._edges)

    def edges(self, known_ids: Optional[Iterable[str]] = None) -> List[SymbolEdge]:
        known = set(known_ids) if known_ids is not None else None
        result: List[SymbolEdge] = []
        for (source, target, kind), conditions in self._edges.items():
            if known is not None and (source not in known or target not in known):
                continue
            merged = [conditions[key] for key in sorted(conditions)]
            result.append(SymbolEdge(source=source, target=target, kind=kind, conditions=merged or None))
        return result


def link_symbols(
    files: Sequence[FileSymbols],
    resolvers: Sequence[Resolver] = RESOLVERS,
) -> Tuple[List[Symbol], List[SymbolEdge]]:
    """Connect per-file symbols and calls into one deduplicated edge list."""
    index = SymbolIndex(files)
    edges = EdgeSet()

    for fs in files:
        bindings = index.imports.get(fs.file, {})
        for binding in bindings.values():
            target = index.lookup(binding.from_file, binding.imported) or index.lookup(binding.from_file, binding.local)
            if target:
                edges.add(symbol_id(fs.file, binding.local), target, "imports")

        for call in fs.calls:
            caller_id = index.lookup(fs.file, call.caller)
            if caller_id is None:
                continue
            for target in resolve_call(index, fs.file, call, resolvers):
                if target != caller_id:
                    edges.add(caller_id, target, "calls", call.condition)

    return list(index.by_id.values()), edges.edges(index.by_id)


def collect_file_symbols(ctx: AnalysisContext, files: Iterable[str]) -> List[FileSymbols]:
    collected: List[FileSymbols] = []
    for rel_path in files:
        parsed = ctx.parse(rel_path)
        if isinstance(parsed, Unparseable):
            logger.debug("Skipping unparseable %s: %s", rel_path, parsed.reason)
            continue
        symbols, calls = extract_symbols(parsed, rel_path)
        collected.append(FileSymbols(
            file=rel_path,
            symbols=symbols,
            calls=calls,
            imports=extract_imports(parsed, ctx.abspath(rel_path), ctx.root),
        ))
    return collected


def build_symbol_graph(root: str) -> SymbolGraph:
    """Scan *root* and return its symbol graph."""
    ctx = AnalysisContext(root)
    files = scan_sources(ctx.root)
    symbols, edges = link_symbols(collect_file_symbols(ctx, files))
    logger.info("Symbol graph for %s: %d symbols, %d edges", ctx.root, len(symbols), len(edges))
    return SymbolGraph(symbols=symbols, edges=edges, files=files)
