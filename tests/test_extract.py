import os

from jsgraph.extract import (
    extract_declarations,
    extract_exports,
    extract_imports,
    extract_references,
    extract_script_refs,
)


def _pairs(facts):
    return [(f.name, f.kind) for f in facts]


def test_named_and_default_exports(parse_js):
    module = parse_js(
        """
        export function load() {}
        export class Loader {}
        export const a1 = 1, b1 = 2;
        const hidden = 3;
        export { hidden, hidden as visible };
        export default function () {}
        """
    )
    assert _pairs(extract_exports(module)) == [
        ("load", "function"),
        ("Loader", "class"),
        ("a1", "variable"),
        ("b1", "variable"),
        ("hidden", "re-export"),
        ("visible", "re-export"),
        ("default", "default"),
    ]


def test_default_export_takes_the_declared_name(parse_js):
    assert _pairs(extract_exports(parse_js("export default class Widget {}\n"))) == [("Widget", "default")]
    assert _pairs(extract_exports(parse_js("const app = 1;\nexport default app;\n"))) == [("app", "default")]


def test_namespace_re_export(parse_js):
    exports = extract_exports(parse_js("export * as helpers from './helpers.js';\n"))
    assert _pairs(exports) == [("helpers", "re-export")]


def test_typescript_exports(parse_js):
    module = parse_js(
        """
        export type Id = string;
        export interface Shape { area(): number }
        export enum Color { Red, Green }
        """,
        path="types.ts",
    )
    assert _pairs(extract_exports(module)) == [("Id", "type"), ("Shape", "interface"), ("Color", "enum")]


def test_commonjs_object_exports(parse_js):
    module = parse_js(
        """
        function x() {}
        const y = 2;
        module.exports = { x, y };
        """
    )
    assert _pairs(extract_exports(module)) == [("x", "commonjs-named"), ("y", "commonjs-named")]


def test_commonjs_single_exports(parse_js):
    assert _pairs(extract_exports(parse_js("module.exports = Service;\n"))) == [("Service", "commonjs-default")]
    assert _pairs(extract_exports(parse_js("module.exports = function () {};\n"))) == [("default", "commonjs-default")]
    assert _pairs(extract_exports(parse_js("exports.run = () => 1;\nmodule.exports.stop = 2;\n"))) == [
        ("run", "commonjs-named"),
        ("stop", "commonjs-named"),
    ]


def test_import_forms_are_resolved(make_tree, parse_js):
    root = make_tree({
        "src/main.js": "",
        "src/models.js": "",
        "src/db.js": "",
        "src/lazy.js": "",
    })
    module = parse_js(
        """
        import Model, { find as lookup, save } from './models';
        import * as db from './db.js';
        import React from 'react';
        const legacy = require('./db');
        const external = require('express');
        const dynamicName = require(name);

        async function later() {
            return import('./lazy.js');
        }
        """
    )
    imports = extract_imports(module, os.path.join(str(root), "src", "main.js"), str(root))
    assert [(i.source, i.resolved) for i in imports] == [
        ("./models", "src/models.js"),
        ("./db.js", "src/db.js"),
        ("./db", "src/db.js"),
        ("./lazy.js", "src/lazy.js"),
    ]
    assert [(s.name, s.imported, s.kind) for s in imports[0].specifiers] == [
        ("Model", "default", "default"),
        ("lookup", "find", "named"),
        ("save", "save", "named"),
    ]
    assert [(s.name, s.kind) for s in imports[1].specifiers] == [("db", "namespace")]
    assert [(s.name, s.kind) for s in imports[2].specifiers] == [("legacy", "commonjs-require")]
    assert [(s.name, s.kind) for s in imports[3].specifiers] == [("default", "dynamic-import")]


def test_side_effect_import_has_no_specifiers(make_tree, parse_js):
    root = make_tree({"main.js": "", "polyfill.js": ""})
    imports = extract_imports(parse_js("import './polyfill.js';\n"), os.path.join(str(root), "main.js"), str(root))
    assert len(imports) == 1
    assert imports[0].specifiers == []


def test_top_level_declarations(parse_js):
    module = parse_js(
        """
        const path = require('path');
        const { join } = require('path');
        const ab = 1;
        let counter = 0;
        var settings = {};
        function start() {
            function nested() {}
        }
        class Engine {}
        """
    )
    assert _pairs(extract_declarations(module)) == [
        ("counter", "variable"),
        ("settings", "variable"),
        ("start", "function"),
        ("Engine", "class"),
    ]


def test_references_skip_declaration_sites(parse_js):
    module = parse_js(
        """
        import { helper } from './helper.js';
        function compute(value) {
            const total = helper(value) + config.scale;
            return format({ total });
        }
        """
    )
    refs = extract_references(module)
    assert {"helper", "value", "config", "format", "total"} <= refs
    assert "compute" not in refs
    assert "scale" not in refs


def test_script_refs(make_tree):
    root = make_tree({
        "web/index.html": "",
        "web/app.js": "",
        "shared/lib.js": "",
    })
    html = """
    <script src="https://cdn.example.com/x.js"></script>
    <script src="//cdn.example.com/y.js"></script>
    <script type="module" src="app.js?v=2"></script>
    <SCRIPT SRC='/shared/lib.js'></SCRIPT>
    <script src="missing.js"></script>
    <script>inline()</script>
    """
    refs = extract_script_refs(html, os.path.join(str(root), "web", "index.html"), str(root))
    assert refs == ["web/app.js", "shared/lib.js"]
