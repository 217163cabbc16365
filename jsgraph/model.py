from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel


ExportKind = Literal[
	"function",
	"class",
	"variable",
	"type",
	"interface",
	"enum",
	"default",
	"re-export",
	"commonjs-default",
	"commonjs-named",
]
SpecifierKind = Literal["default", "namespace", "named", "commonjs-require", "dynamic-import"]
DeclarationKind = Literal["function", "class", "variable"]
SymbolKind = Literal["function", "class", "method", "variable", "type", "interface", "enum"]
EdgeKind = Literal["calls", "imports"]
Branch = Literal["if", "else", "ternary-then", "ternary-else"]


class Export(BaseModel):
	name: str
	kind: ExportKind


class ImportSpecifier(BaseModel):
	# name is the local binding; imported is the name on the exporting side
	name: str
	imported: str
	kind: SpecifierKind


class Import(BaseModel):
	source: str
	resolved: Optional[str] = None
	specifiers: List[ImportSpecifier] = []


class Declaration(BaseModel):
	name: str
	kind: DeclarationKind


class FileRecord(BaseModel):
	path: str
	size: int = 0
	lines: int = 0
	exports: List[Export] = []
	imports: List[Import] = []
	declarations: List[Declaration] = []
	references: List[str] = []
	script_refs: List[str] = []
	parsed: bool = True


class FileNode(BaseModel):
	id: str
	exports: List[Export] = []
	lines: int = 0
	folder: str
	extension: str
	incoming_count: int = 0


class FileEdge(BaseModel):
	source: str
	target: str
	weight: int = 0
	references: List[str] = []


class FileGraph(BaseModel):
	nodes: List[FileNode] = []
	edges: List[FileEdge] = []
	folders: List[str] = []
	extensions: List[str] = []


class Condition(BaseModel):
	text: str
	branch: Branch

	def key(self) -> tuple:
		return (self.text, self.branch)


class CallFact(BaseModel):
	caller: str
	callee: str
	object_name: Optional[str] = None
	line: int = 0
	condition: Optional[Condition] = None


class Symbol(BaseModel):
	id: str
	name: str
	kind: SymbolKind
	file: str
	start_line: int = 0
	end_line: int = 0
	params: Optional[List[str]] = None
	parent: Optional[str] = None
	exported: Optional[bool] = None
	super_class: Optional[str] = None
	methods: Optional[List[str]] = None


class SymbolEdge(BaseModel):
	source: str
	target: str
	kind: EdgeKind
	conditions: Optional[List[Condition]] = None


class SymbolGraph(BaseModel):
	symbols: List[Symbol] = []
	edges: List[SymbolEdge] = []
	files: List[str] = []
