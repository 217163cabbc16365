import os

from jsgraph.resolve import resolve_import


def _from(root, rel):
    return os.path.join(str(root), rel)


def test_resolution_probe_order(make_tree):
    root = make_tree({
        "src/main.js": "",
        "src/a.js": "",
        "src/b.ts": "",
        "src/lib/index.tsx": "",
        "src/data.json": "",
    })
    main = _from(root, "src/main.js")
    assert resolve_import("./a.js", main, str(root)) == "src/a.js"
    assert resolve_import("./a", main, str(root)) == "src/a.js"
    assert resolve_import("./b", main, str(root)) == "src/b.ts"
    assert resolve_import("./lib", main, str(root)) == "src/lib/index.tsx"
    assert resolve_import("./data.json", main, str(root)) == "src/data.json"
    assert resolve_import("../src/a", main, str(root)) == "src/a.js"


def test_exact_file_wins_over_extension(make_tree):
    root = make_tree({"src/main.js": "", "src/util": "", "src/util.js": ""})
    assert resolve_import("./util", _from(root, "src/main.js"), str(root)) == "src/util"


def test_bare_specifiers_are_external(make_tree):
    root = make_tree({"main.js": "", "lodash.js": "", "lodash/index.js": ""})
    main = _from(root, "main.js")
    assert resolve_import("lodash", main, str(root)) is None
    assert resolve_import("@scope/pkg", main, str(root)) is None


def test_missing_and_escaping_targets(make_tree):
    root = make_tree({"app/main.js": "", "outside.js": ""})
    app_root = str(root / "app")
    main = os.path.join(app_root, "main.js")
    assert resolve_import("./missing", main, app_root) is None
    assert resolve_import("../outside", main, app_root) is None


def test_absolute_specifier_inside_root(make_tree):
    root = make_tree({"main.js": "", "shared/x.js": ""})
    target = os.path.join(str(root), "shared", "x")
    assert resolve_import(target, _from(root, "main.js"), str(root)) == "shared/x.js"
