"""Tree-sitter parsing of JavaScript / TypeScript sources.

``parse_source`` never raises on bad input: it returns an ``Unparseable``
record that callers treat as a present-but-empty file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Union

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from .fs_scan import detect_language

logger = logging.getLogger(__name__)


# JSX is part of the JavaScript grammar, so plain .js files may mix it in.
_GRAMMARS: Dict[str, Callable[[], object]] = {
	"javascript": tree_sitter_javascript.language,
	"typescript": tree_sitter_typescript.language_typescript,
	"tsx": tree_sitter_typescript.language_tsx,
}
_PARSERS: Dict[str, Parser] = {}

FUNCTION_TYPES = frozenset({
	"function_declaration",
	"generator_function_declaration",
	"function_expression",
	"function",
	"generator_function",
	"arrow_function",
	"method_definition",
})
CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})

# `export v from "mod"` and `export v, { x } from "mod"` are not in the
# grammars. They are rewritten in place to `export { default as v ... }`.
_EXPORT_DEFAULT_FROM = re.compile(
	rb"^([ \t]*export[ \t]+)(?!default\b|from\b|type\b)([A-Za-z_$][\w$]*)[ \t]*(from[ \t]*['\"]|,[ \t]*\{)",
	re.MULTILINE,
)


@dataclass
class ParsedModule:
	path: str
	text: str
	tree: Tree
	language: str

	@property
	def root(self) -> Node:
		return self.tree.root_node


@dataclass
class Unparseable:
	path: str
	text: str
	reason: str


ParseResult = Union[ParsedModule, Unparseable]


def get_parser(language: str) -> Parser:
	parser = _PARSERS.get(language)
	if parser is None:
		parser = Parser(Language(_GRAMMARS[language]()))
		_PARSERS[language] = parser
	return parser


def _specifier_form(match: re.Match) -> bytes:
	prefix, name, rest = match.group(1), match.group(2), match.group(3)
	if rest.startswith(b"from"):
		return prefix + b"{ default as " + name + b" } " + rest
	return prefix + b"{ default as " + name + b", "


def rewrite_export_default_from(data: bytes) -> bytes:
	"""Turn export-default-from statements into plain re-exports.

	Only the statement's own line changes, so line numbers are kept.
	"""
	return _EXPORT_DEFAULT_FROM.sub(_specifier_form, data)


def parse_source(path: str, data: bytes) -> ParseResult:
	"""Parse raw file bytes using the grammar implied by *path*'s extension."""
	try:
		text = data.decode("utf-8")
	except UnicodeDecodeError as exc:
		return Unparseable(path=path, text=data.decode("utf-8", errors="replace"), reason=str(exc))

	language = detect_language(path)
	if language not in _GRAMMARS:
		return Unparseable(path=path, text=text, reason=f"no grammar for {language}")

	parser = get_parser(language)
	tree = parser.parse(data)
	if tree.root_node.has_error:
		rewritten = rewrite_export_default_from(data)
		if rewritten != data:
			tree = parser.parse(rewritten)
	if tree.root_node.has_error:
		logger.debug("Syntax errors in %s, treating it as unparseable", path)
		return Unparseable(path=path, text=text, reason="syntax error")
	return ParsedModule(path=path, text=text, tree=tree, language=language)


def parse_file(path: str) -> ParseResult:
	with open(path, "rb") as fh:
		data = fh.read()
	return parse_source(path, data)


class NodePath:
	"""A node plus the chain of its ancestors, as seen by ``walk``."""

	__slots__ = ("node", "parent")

	def __init__(self, node: Node, parent: Optional["NodePath"] = None) -> None:
		self.node = node
		self.parent = parent

	@property
	def type(self) -> str:
		return self.node.type

	def ancestors(self) -> Iterator["NodePath"]:
		cursor = self.parent
		while cursor is not None:
			yield cursor
			cursor = cursor.parent


Handler = Callable[[NodePath], None]


def walk(root: Node, handlers: Mapping[str, Handler]) -> None:
	"""Depth-first, source-ordered traversal over named nodes.

	Each node whose type has an entry in *handlers* is passed to it before
	its children are visited.
	"""
	stack: List[NodePath] = [NodePath(root)]
	while stack:
		path = stack.pop()
		handler = handlers.get(path.node.type)
		if handler is not None:
			handler(path)
		for child in reversed(path.node.named_children):
			stack.append(NodePath(child, path))


def node_text(node: Optional[Node]) -> str:
	if node is None or node.text is None:
		return ""
	return node.text.decode("utf-8", errors="replace")


def field_text(node: Node, field: str) -> Optional[str]:
	child = node.child_by_field_name(field)
	if child is None:
		return None
	return node_text(child)


def is_field(parent: Node, field: str, child: Node) -> bool:
	target = parent.child_by_field_name(field)
	return target is not None and target == child


def string_value(node: Optional[Node]) -> Optional[str]:
	"""Value of a plain string literal, without its quotes."""
	if node is None or node.type != "string":
		return None
	raw = node_text(node)
	if len(raw) >= 2 and raw[0] in "'\"" and raw[-1] == raw[0]:
		return raw[1:-1]
	return None


def start_line(node: Optional[Node]) -> int:
	return node.start_point[0] + 1 if node is not None else 0


def end_line(node: Optional[Node]) -> int:
	return node.end_point[0] + 1 if node is not None else 0


def has_token(node: Node, token: str) -> bool:
	"""True when *node* has an anonymous child token spelled *token*."""
	return any(not child.is_named and child.type == token for child in node.children)


def parameter_names(params: Optional[Node]) -> List[str]:
	"""Readable names for a formal parameter list; patterns become ``...``."""
	if params is None:
		return []
	if params.type == "identifier":
		return [node_text(params)]
	names: List[str] = []
	for param in params.named_children:
		if param.type in ("comment", "decorator"):
			continue
		target = param
		# TypeScript wraps parameters, optionally with a default value
		if param.type in ("required_parameter", "optional_parameter"):
			target = param.child_by_field_name("pattern") or param
		if target.type == "assignment_pattern":
			target = target.child_by_field_name("left") or target
		names.append(node_text(target) if target.type == "identifier" else "...")
	return names
