from __future__ import annotations

from typing import List, Optional, Tuple

from tree_sitter import Node

from .ast_parse import (
    FUNCTION_TYPES,
    NodePath,
    ParsedModule,
    end_line,
    is_field,
    node_text,
    parameter_names,
    start_line,
    walk,
)
from .config import get_settings
from .extract import declared_name, is_require_call
from .model import CallFact, Condition, Symbol


NAMED_FUNCTION_DECLARATIONS = ("function_declaration", "generator_function_declaration")
FUNCTION_VALUES = ("arrow_function", "function_expression", "function", "generator_function")
CLASS_DECLARATIONS = ("class_declaration", "abstract_class_declaration")
MIN_VARIABLE_NAME = 2

_TYPE_SYMBOLS = {
    "type_alias_declaration": "type",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
}


def symbol_id(rel_file: str, qualified_name: str) -> str:
    return f"{rel_file}::{qualified_name}"


def _is_exported(path: NodePath) -> bool:
    return path.parent is not None and path.parent.type == "export_statement"


def _assigned_name(path: NodePath) -> Optional[str]:
    """Name of the variable a function value is assigned to, if any."""
    parent = path.parent
    if parent is None or parent.type != "variable_declarator":
        return None
    if not is_field(parent.node, "value", path.node):
        return None
    name = parent.node.child_by_field_name("name")
    if name is None or name.type != "identifier":
        return None
    return node_text(name)


def _method_name(node: Node) -> Optional[str]:
    name = node.child_by_field_name("name")
    if name is None or name.type != "property_identifier":
        return None
    return node_text(name)


def superclass_name(class_node: Node) -> Optional[str]:
    for child in class_node.named_children:
        if child.type != "class_heritage":
            continue
        for part in child.named_children:
            # TypeScript wraps the expression in an extends_clause
            if part.type == "extends_clause":
                part = part.child_by_field_name("value")
            if part is not None and part.type == "identifier":
                return node_text(part)
            return None
    return None


def collapse_condition(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) > limit:
        text = text[: max(limit - 3, 0)] + "..."
    return text


def _test_text(test: Optional[Node], limit: int) -> str:
    if test is not None and test.type == "parenthesized_expression":
        inner = [c for c in test.named_children if c.type != "comment"]
        if inner:
            test = inner[0]
    return collapse_condition(node_text(test), limit)


def nearest_condition(path: NodePath, limit: int) -> Optional[Condition]:
    """The innermost if/else or ternary branch containing *path*.

    The search stops at the first enclosing function. A call inside a test
    expression is not in either branch of that conditional.
    """
    child = path
    for ancestor in path.ancestors():
        node = ancestor.node
        if ancestor.type in FUNCTION_TYPES:
            return None
        if ancestor.type == "if_statement":
            if is_field(node, "consequence", child.node):
                return Condition(text=_test_text(node.child_by_field_name("condition"), limit), branch="if")
            if is_field(node, "alternative", child.node):
                return Condition(text=_test_text(node.child_by_field_name("condition"), limit), branch="else")
        elif ancestor.type == "ternary_expression":
            if is_field(node, "consequence", child.node):
                return Condition(text=_test_text(node.child_by_field_name("condition"), limit), branch="ternary-then")
            if is_field(node, "alternative", child.node):
                return Condition(text=_test_text(node.child_by_field_name("condition"), limit), branch="ternary-else")
        child = ancestor
    return None


def enclosing_caller(path: NodePath) -> Optional[str]:
    """Qualified name of the function or method a call belongs to.

    Anonymous functions (callbacks, IIFEs) are looked through, so their
    calls count for the nearest named function around them.
    """
    for ancestor in path.ancestors():
        if ancestor.type in NAMED_FUNCTION_DECLARATIONS:
            return declared_name(ancestor.node)
        if ancestor.type in FUNCTION_VALUES:
            name = _assigned_name(ancestor)
            if name:
                return name
            continue
        if ancestor.type == "method_definition":
            body = ancestor.parent
            if body is None or body.type != "class_body":
                # object literal method
                continue
            cls = body.parent
            method = _method_name(ancestor.node)
            if cls is None or cls.type not in CLASS_DECLARATIONS or not method:
                return None
            class_name = declared_name(cls.node)
            return f"{class_name}.{method}" if class_name else None
    return None


def extract_symbols(
    module: ParsedModule,
    rel_file: str,
    condition_limit: Optional[int] = None,
) -> Tuple[List[Symbol], List[CallFact]]:
    """Symbols declared in one file and the calls made inside them."""
    limit = condition_limit or get_settings().condition_max_length
    symbols: List[Symbol] = []
    calls: List[CallFact] = []

    def on_function(path: NodePath) -> None:
        node = path.node
        name = declared_name(node)
        if not name:
            return
        symbols.append(Symbol(
            id=symbol_id(rel_file, name),
            name=name,
            kind="function",
            file=rel_file,
            start_line=start_line(node),
            end_line=end_line(node),
            params=parameter_names(node.child_by_field_name("parameters")),
            exported=_is_exported(path),
        ))

    def on_function_value(path: NodePath) -> None:
        name = _assigned_name(path)
        if not name:
            return
        node = path.node
        params = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
        declaration = path.parent.parent if path.parent is not None else None
        symbols.append(Symbol(
            id=symbol_id(rel_file, name),
            name=name,
            kind="function",
            file=rel_file,
            start_line=start_line(node),
            end_line=end_line(node),
            params=parameter_names(params),
            exported=declaration is not None and _is_exported(declaration),
        ))

    def on_class(path: NodePath) -> None:
        node = path.node
        class_name = declared_name(node)
        if not class_name:
            return
        class_id = symbol_id(rel_file, class_name)
        methods: List[str] = []
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            if member.type != "method_definition":
                continue
            method = _method_name(member)
            if not method:
                continue
            methods.append(method)
            qualified = f"{class_name}.{method}"
            symbols.append(Symbol(
                id=symbol_id(rel_file, qualified),
                name=qualified,
                kind="method",
                file=rel_file,
                start_line=start_line(member),
                end_line=end_line(member),
                params=parameter_names(member.child_by_field_name("parameters")),
                parent=class_id,
            ))
        symbols.append(Symbol(
            id=class_id,
            name=class_name,
            kind="class",
            file=rel_file,
            start_line=start_line(node),
            end_line=end_line(node),
            methods=methods,
            super_class=superclass_name(node),
            exported=_is_exported(path),
        ))

    def on_variables(path: NodePath) -> None:
        if path.parent is None or path.parent.type not in ("program", "export_statement"):
            return
        for declarator in path.node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = node_text(name_node)
            if len(name) < MIN_VARIABLE_NAME:
                continue
            value = declarator.child_by_field_name("value")
            # require() is an import; function values are symbols of their own
            if is_require_call(value) or (value is not None and value.type in FUNCTION_VALUES):
                continue
            symbols.append(Symbol(
                id=symbol_id(rel_file, name),
                name=name,
                kind="variable",
                file=rel_file,
                start_line=start_line(declarator),
                end_line=end_line(declarator),
                exported=_is_exported(path),
            ))

    def on_type(path: NodePath) -> None:
        node = path.node
        name = declared_name(node)
        if not name:
            return
        symbols.append(Symbol(
            id=symbol_id(rel_file, name),
            name=name,
            kind=_TYPE_SYMBOLS[node.type],
            file=rel_file,
            start_line=start_line(node),
            end_line=end_line(node),
            exported=_is_exported(path),
        ))

    def on_call(path: NodePath) -> None:
        func = path.node.child_by_field_name("function")
        if func is None:
            return
        object_name: Optional[str] = None
        if func.type == "identifier":
            callee = node_text(func)
        elif func.type == "member_expression":
            prop = func.child_by_field_name("property")
            if prop is None or prop.type != "property_identifier":
                return
            callee = node_text(prop)
            obj = func.child_by_field_name("object")
            if obj is not None and obj.type in ("identifier", "this"):
                object_name = node_text(obj)
        else:
            return
        if callee == "require":
            return
        caller = enclosing_caller(path)
        if caller is None:
            return
        calls.append(CallFact(
            caller=caller,
            callee=callee,
            object_name=object_name,
            line=start_line(path.node),
            condition=nearest_condition(path, limit),
        ))

    handlers = {
        "class_declaration": on_class,
        "abstract_class_declaration": on_class,
        "lexical_declaration": on_variables,
        "variable_declaration": on_variables,
        "call_expression": on_call,
    }
    for node_type in NAMED_FUNCTION_DECLARATIONS:
        handlers[node_type] = on_function
    for node_type in FUNCTION_VALUES:
        handlers[node_type] = on_function_value
    for node_type in _TYPE_SYMBOLS:
        handlers[node_type] = on_type
    walk(module.root, handlers)
    return symbols, calls
