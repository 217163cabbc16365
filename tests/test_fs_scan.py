from jsgraph.fs_scan import detect_language, scan_sources


def test_scan_filters_extensions_and_prunes_ignored_dirs(make_tree):
    root = make_tree({
        "src/app.js": "",
        "src/view.tsx": "",
        "src/legacy.cjs": "",
        "src/readme.md": "",
        "index.html": "",
        "node_modules/pkg/index.js": "",
        "src/vendor/lib.js": "",
        "packages/ui/dist/bundle.js": "",
        ".git/hooks/pre-commit.js": "",
    })
    assert scan_sources(str(root)) == ["src/app.js", "src/legacy.cjs", "src/view.tsx"]


def test_scan_includes_html_on_request(make_tree):
    root = make_tree({"index.html": "", "page.HTM": "", "a.mjs": ""})
    assert scan_sources(str(root), include_html=True) == ["a.mjs", "index.html", "page.HTM"]
    assert scan_sources(str(root)) == ["a.mjs"]


def test_scan_accepts_overrides(make_tree):
    root = make_tree({"a.js": "", "b.ts": "", "gen/c.js": ""})
    assert scan_sources(str(root), extensions=[".ts"]) == ["b.ts"]
    assert scan_sources(str(root), ignore_dirs=["gen"]) == ["a.js", "b.ts"]


def test_scan_missing_root_is_empty(tmp_path):
    assert scan_sources(str(tmp_path / "nope")) == []


def test_detect_language():
    assert detect_language("a/b.jsx") == "javascript"
    assert detect_language("a/b.ts") == "typescript"
    assert detect_language("a/b.tsx") == "tsx"
    assert detect_language("index.html") == "html"
    assert detect_language("setup.py") == "unknown"
