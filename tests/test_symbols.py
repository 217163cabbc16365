from jsgraph.symbols import collapse_condition, extract_symbols


def _by_id(symbols):
    return {s.id: s for s in symbols}


def test_functions_classes_and_methods(parse_js):
    module = parse_js(
        """
        export function create(name, size = 1) {
            return new Widget(name);
        }

        const helper = (a) => a;
        const legacy = function (b) {};

        export class Widget extends Base {
            constructor(name) {
                this.name = name;
            }

            render() {}
        }
        """
    )
    symbols, _ = extract_symbols(module, "ui.js")
    by_id = _by_id(symbols)
    assert set(by_id) == {
        "ui.js::create",
        "ui.js::helper",
        "ui.js::legacy",
        "ui.js::Widget",
        "ui.js::Widget.constructor",
        "ui.js::Widget.render",
    }

    create = by_id["ui.js::create"]
    assert (create.kind, create.params, create.exported) == ("function", ["name", "size"], True)
    assert (create.start_line, create.end_line) == (2, 4)
    assert by_id["ui.js::helper"].exported is False
    assert by_id["ui.js::legacy"].kind == "function"

    widget = by_id["ui.js::Widget"]
    assert widget.kind == "class"
    assert widget.methods == ["constructor", "render"]
    assert widget.super_class == "Base"
    assert widget.exported is True

    render = by_id["ui.js::Widget.render"]
    assert render.kind == "method"
    assert render.name == "Widget.render"
    assert render.parent == "ui.js::Widget"


def test_variables_skip_imports_and_function_values(parse_js):
    module = parse_js(
        """
        const fs = require('fs');
        const x = 1;
        const handler = () => {};
        export let exportedCount = 0;
        var config = { debug: true };

        function scope() {
            const inner = 2;
        }
        """
    )
    symbols, _ = extract_symbols(module, "vars.js")
    variables = [(s.name, s.exported) for s in symbols if s.kind == "variable"]
    assert variables == [("exportedCount", True), ("config", False)]


def test_typescript_symbols(parse_js):
    module = parse_js(
        """
        export type Id = string;
        interface Shape {
            area(): number;
        }
        export enum Color { Red }
        export class Circle implements Shape {
            area(): number { return 1; }
        }
        """,
        path="shapes.ts",
    )
    symbols, _ = extract_symbols(module, "shapes.ts")
    kinds = {s.name: s.kind for s in symbols}
    assert kinds["Id"] == "type"
    assert kinds["Shape"] == "interface"
    assert kinds["Color"] == "enum"
    assert kinds["Circle"] == "class"
    assert kinds["Circle.area"] == "method"
    assert _by_id(symbols)["shapes.ts::Circle"].super_class is None


def test_calls_are_attributed_to_enclosing_symbol(parse_js):
    module = parse_js(
        """
        const lib = require('./lib');
        setup();

        function main() {
            items.forEach((item) => process(item));
            lib.run();
        }

        class Job {
            start() {
                this.stop();
            }
        }
        """
    )
    _, calls = extract_symbols(module, "main.js")
    facts = [(c.caller, c.callee, c.object_name) for c in calls]
    assert facts == [
        ("main", "forEach", "items"),
        ("main", "process", None),
        ("main", "run", "lib"),
        ("Job.start", "stop", "this"),
    ]


def test_if_else_conditions(parse_js):
    module = parse_js(
        """
        function foo() {
            if (cond) {
                bar();
            } else {
                baz();
            }
            always();
        }
        """
    )
    _, calls = extract_symbols(module, "a.js")
    conditions = {c.callee: c.condition for c in calls}
    assert (conditions["bar"].text, conditions["bar"].branch) == ("cond", "if")
    assert (conditions["baz"].text, conditions["baz"].branch) == ("cond", "else")
    assert conditions["always"] is None


def test_ternary_and_innermost_condition(parse_js):
    module = parse_js(
        """
        function pick(user) {
            if (user.active) {
                return user.isAdmin ? grant(user) : deny(user);
            }
            if (check(user)) {}
        }
        """
    )
    _, calls = extract_symbols(module, "a.js")
    conditions = {c.callee: c.condition for c in calls}
    assert (conditions["grant"].text, conditions["grant"].branch) == ("user.isAdmin", "ternary-then")
    assert (conditions["deny"].text, conditions["deny"].branch) == ("user.isAdmin", "ternary-else")
    # evaluated in the test itself, not inside a branch
    assert conditions["check"] is None


def test_condition_search_stops_at_function_boundary(parse_js):
    module = parse_js(
        """
        function outer() {
            if (ready) {
                const later = () => {
                    work();
                };
            }
        }
        """
    )
    _, calls = extract_symbols(module, "a.js")
    assert [(c.caller, c.callee, c.condition) for c in calls] == [("later", "work", None)]


def test_condition_text_is_collapsed_and_truncated(parse_js):
    module = parse_js(
        """
        function run() {
            if (someVeryLongCondition &&
                    anotherVeryLongCondition && yetAnother) {
                go();
            }
        }
        """
    )
    _, calls = extract_symbols(module, "a.js")
    text = calls[0].condition.text
    assert len(text) == 40
    assert text.startswith("someVeryLongCondition && anotherVery")
    assert text.endswith("...")
    assert "\n" not in text


def test_collapse_condition():
    assert collapse_condition("a  &&\n   b", 40) == "a && b"
    assert collapse_condition("x" * 50, 10) == "xxxxxxx..."
