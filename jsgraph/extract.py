"""Per-file fact extraction: exports, imports, declarations, references.

Module files are read from their tree-sitter AST. HTML files are scanned
with a regex for ``<script src>`` references since they are not parsed.
"""

from __future__ import annotations

import os
import re
from typing import List, Optional, Set

from tree_sitter import Node

from .ast_parse import (
    NodePath,
    ParsedModule,
    has_token,
    is_field,
    node_text,
    string_value,
    walk,
)
from .fs_scan import to_posix
from .model import Declaration, Export, Import, ImportSpecifier
from .resolve import is_within, resolve_import


SCRIPT_SRC_RE = re.compile(r"""<script[^>]+src=["']([^"']+)["'][^>]*>""", re.IGNORECASE)
EXTERNAL_PREFIXES = ("http://", "https://", "//")

MIN_DECLARATION_NAME = 3

_DECLARATION_EXPORT_KINDS = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "function_signature": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "type_alias_declaration": "type",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
}
_VARIABLE_DECLARATIONS = ("lexical_declaration", "variable_declaration")
_NAME_DECLARING = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "variable_declarator",
})
_SPECIFIER_POSITIONS = frozenset({
    "import_specifier",
    "import_clause",
    "namespace_import",
    "export_specifier",
    "import_require_clause",
})


def declared_name(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    name = node.child_by_field_name("name")
    if name is None:
        return None
    return node_text(name)


def is_require_call(node: Optional[Node]) -> bool:
    if node is None or node.type != "call_expression":
        return False
    func = node.child_by_field_name("function")
    return func is not None and func.type == "identifier" and node_text(func) == "require"


def call_arguments(node: Node) -> List[Node]:
    args = node.child_by_field_name("arguments")
    if args is None:
        return []
    return [arg for arg in args.named_children if arg.type != "comment"]


def _module_name(node: Optional[Node]) -> Optional[str]:
    # Export/import specifier names may be identifiers or string literals
    if node is None:
        return None
    if node.type == "string":
        return string_value(node)
    return node_text(node)


def _member_parts(node: Node):
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    prop_name = node_text(prop) if prop is not None and prop.type == "property_identifier" else None
    return obj, prop_name


def _is_identifier(node: Optional[Node], name: str) -> bool:
    return node is not None and node.type == "identifier" and node_text(node) == name


def _is_module_exports(node: Optional[Node]) -> bool:
    if node is None or node.type != "member_expression":
        return False
    obj, prop_name = _member_parts(node)
    return _is_identifier(obj, "module") and prop_name == "exports"


def _declaration_exports(decl: Node) -> List[Export]:
    if decl.type == "ambient_declaration":
        exports: List[Export] = []
        for child in decl.named_children:
            exports.extend(_declaration_exports(child))
        return exports
    if decl.type in _VARIABLE_DECLARATIONS:
        exports = []
        for declarator in decl.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                exports.append(Export(name=node_text(name), kind="variable"))
        return exports
    kind = _DECLARATION_EXPORT_KINDS.get(decl.type)
    name = declared_name(decl)
    if kind is None or not name:
        return []
    return [Export(name=name, kind=kind)]


def extract_exports(module: ParsedModule) -> List[Export]:
    exports: List[Export] = []

    def on_export(path: NodePath) -> None:
        node = path.node
        decl = node.child_by_field_name("declaration")
        if has_token(node, "default"):
            target = decl if decl is not None else node.child_by_field_name("value")
            if target is not None and target.type == "identifier":
                name = node_text(target)
            else:
                name = declared_name(target)
            exports.append(Export(name=name or "default", kind="default"))
            return
        if decl is not None:
            exports.extend(_declaration_exports(decl))
        for child in node.named_children:
            if child.type == "export_clause":
                for spec in child.named_children:
                    if spec.type != "export_specifier":
                        continue
                    exported = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    name = _module_name(exported)
                    if name:
                        exports.append(Export(name=name, kind="re-export"))
            elif child.type == "namespace_export":
                for ident in child.named_children:
                    name = _module_name(ident)
                    if name:
                        exports.append(Export(name=name, kind="re-export"))

    def on_assignment(path: NodePath) -> None:
        left = path.node.child_by_field_name("left")
        right = path.node.child_by_field_name("right")
        if left is None or right is None or left.type != "member_expression":
            return
        obj, prop_name = _member_parts(left)
        if _is_identifier(obj, "module") and prop_name == "exports":
            if right.type == "identifier":
                exports.append(Export(name=node_text(right), kind="commonjs-default"))
            elif right.type == "object":
                for member in right.named_children:
                    key: Optional[Node] = None
                    if member.type == "shorthand_property_identifier":
                        key = member
                    elif member.type == "pair":
                        key = member.child_by_field_name("key")
                    elif member.type == "method_definition":
                        key = member.child_by_field_name("name")
                    if key is not None and key.type in ("property_identifier", "shorthand_property_identifier"):
                        exports.append(Export(name=node_text(key), kind="commonjs-named"))
            else:
                exports.append(Export(name="default", kind="commonjs-default"))
        elif prop_name and (_is_identifier(obj, "exports") or _is_module_exports(obj)):
            exports.append(Export(name=prop_name, kind="commonjs-named"))

    walk(module.root, {
        "export_statement": on_export,
        "assignment_expression": on_assignment,
    })
    return exports


def _clause_specifiers(clause: Node) -> List[ImportSpecifier]:
    specifiers: List[ImportSpecifier] = []
    for child in clause.named_children:
        if child.type == "identifier":
            specifiers.append(ImportSpecifier(name=node_text(child), imported="default", kind="default"))
        elif child.type == "namespace_import":
            for ident in child.named_children:
                if ident.type == "identifier":
                    specifiers.append(ImportSpecifier(name=node_text(ident), imported="*", kind="namespace"))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                imported = _module_name(spec.child_by_field_name("name"))
                if not imported:
                    continue
                local = _module_name(spec.child_by_field_name("alias")) or imported
                specifiers.append(ImportSpecifier(name=local, imported=imported, kind="named"))
    return specifiers


def _require_binding(path: NodePath) -> str:
    parent = path.parent
    if parent is not None and parent.type == "variable_declarator" and is_field(parent.node, "value", path.node):
        name = parent.node.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            return node_text(name)
    return "default"


def extract_imports(module: ParsedModule, file_path: str, root: str) -> List[Import]:
    """Collect resolved imports of one module.

    *file_path* is the absolute path of the module, used as the base for
    relative specifiers. Imports that do not resolve to a file in *root*
    are dropped.
    """
    imports: List[Import] = []

    def add(source: Optional[str], specifiers: List[ImportSpecifier]) -> None:
        if source is None:
            return
        resolved = resolve_import(source, file_path, root)
        if resolved is None:
            return
        imports.append(Import(source=source, resolved=resolved, specifiers=specifiers))

    def on_import(path: NodePath) -> None:
        node = path.node
        for child in node.named_children:
            if child.type == "import_require_clause":
                local = next((node_text(c) for c in child.named_children if c.type == "identifier"), "default")
                add(
                    string_value(child.child_by_field_name("source")),
                    [ImportSpecifier(name=local, imported="default", kind="commonjs-require")],
                )
                return
        specifiers: List[ImportSpecifier] = []
        for child in node.named_children:
            if child.type == "import_clause":
                specifiers.extend(_clause_specifiers(child))
        add(string_value(node.child_by_field_name("source")), specifiers)

    def on_call(path: NodePath) -> None:
        node = path.node
        func = node.child_by_field_name("function")
        if func is None:
            return
        args = call_arguments(node)
        if is_require_call(node) and len(args) == 1:
            source = string_value(args[0])
            if source is not None:
                add(source, [ImportSpecifier(name=_require_binding(path), imported="default", kind="commonjs-require")])
        elif func.type == "import" and args:
            source = string_value(args[0])
            if source is not None:
                add(source, [ImportSpecifier(name="default", imported="default", kind="dynamic-import")])

    walk(module.root, {
        "import_statement": on_import,
        "call_expression": on_call,
    })
    return imports


def extract_declarations(module: ParsedModule) -> List[Declaration]:
    """Program-level declarations, used when a script has no exports."""
    declarations: List[Declaration] = []
    for node in module.root.named_children:
        if node.type in ("function_declaration", "generator_function_declaration"):
            name = declared_name(node)
            if name and len(name) >= MIN_DECLARATION_NAME:
                declarations.append(Declaration(name=name, kind="function"))
        elif node.type == "class_declaration":
            name = declared_name(node)
            if name and len(name) >= MIN_DECLARATION_NAME:
                declarations.append(Declaration(name=name, kind="class"))
        elif node.type in _VARIABLE_DECLARATIONS:
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                # destructuring patterns are import aliases, not declarations
                if name_node is None or name_node.type != "identifier":
                    continue
                if is_require_call(declarator.child_by_field_name("value")):
                    continue
                name = node_text(name_node)
                if len(name) >= MIN_DECLARATION_NAME:
                    declarations.append(Declaration(name=name, kind="variable"))
    return declarations


def extract_references(module: ParsedModule) -> Set[str]:
    """Identifier usage sites; declared names and specifier names are skipped."""
    refs: Set[str] = set()

    def on_identifier(path: NodePath) -> None:
        parent = path.parent
        if parent is not None:
            if parent.type in _NAME_DECLARING and is_field(parent.node, "name", path.node):
                return
            if parent.type in _SPECIFIER_POSITIONS:
                return
        refs.add(node_text(path.node))

    walk(module.root, {
        "identifier": on_identifier,
        "shorthand_property_identifier": on_identifier,
    })
    return refs


def extract_script_refs(html: str, html_path: str, root: str) -> List[str]:
    """Repo-relative paths of local files named by ``<script src>`` tags.

    Relative sources resolve against the HTML file's directory, sources
    starting with ``/`` against *root*.
    """
    refs: List[str] = []
    for match in SCRIPT_SRC_RE.finditer(html):
        src = match.group(1).strip()
        if src.startswith(EXTERNAL_PREFIXES):
            continue
        src = src.split("#", 1)[0].split("?", 1)[0]
        if not src:
            continue
        if src.startswith("/"):
            candidate = os.path.join(root, src.lstrip("/"))
        else:
            candidate = os.path.join(os.path.dirname(html_path), src)
        candidate = os.path.normpath(candidate)
        if os.path.isfile(candidate) and is_within(root, candidate):
            refs.append(to_posix(os.path.relpath(candidate, root)))
    return refs
