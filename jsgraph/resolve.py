from __future__ import annotations

import os
from typing import Iterable, List, Optional

from .config import get_settings
from .fs_scan import to_posix


def is_within(root: str, path: str) -> bool:
    root = os.path.abspath(root)
    path = os.path.abspath(path)
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def candidate_paths(base: str, extensions: Iterable[str]) -> List[str]:
    # Exact path, then with an extension, then as a directory index
    extensions = list(extensions)
    candidates = [base]
    candidates.extend(base + ext for ext in extensions)
    candidates.extend(os.path.join(base, "index" + ext) for ext in extensions)
    return candidates


def resolve_import(
    specifier: str,
    from_file: str,
    root: str,
    extensions: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """Map an import specifier to a repo-relative posix path.

    Bare specifiers (no leading ``.`` or ``/``) name external packages and
    are never resolved, even when a same-named local file exists. There is
    no package.json ``main``/``exports`` support.
    """
    if not specifier.startswith((".", "/")):
        return None

    base = os.path.normpath(os.path.join(os.path.dirname(from_file), specifier))
    for candidate in candidate_paths(base, extensions or get_settings().source_extensions):
        if os.path.isfile(candidate) and is_within(root, candidate):
            return to_posix(os.path.relpath(candidate, root))
    return None
