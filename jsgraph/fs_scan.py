from __future__ import annotations

import os
from typing import Dict, Iterable, List, Optional

from .config import get_settings


EXTENSION_LANGUAGE: Dict[str, str] = {
	".js": "javascript",
	".jsx": "javascript",
	".mjs": "javascript",
	".cjs": "javascript",
	".ts": "typescript",
	".tsx": "tsx",
	".html": "html",
	".htm": "html",
}


def file_extension(path: str) -> str:
	return os.path.splitext(path)[1].lower()


def detect_language(filename: str) -> str:
	return EXTENSION_LANGUAGE.get(file_extension(filename), "unknown")


def to_posix(path: str) -> str:
	return path.replace(os.sep, "/")


def scan_sources(
	root: str,
	include_html: bool = False,
	extensions: Optional[Iterable[str]] = None,
	ignore_dirs: Optional[Iterable[str]] = None,
) -> List[str]:
	"""List source files under *root* as sorted repo-relative posix paths.

	Ignored directories are pruned during the walk, wherever they appear.
	"""
	settings = get_settings()
	wanted = set(ext.lower() for ext in (extensions or settings.source_extensions))
	if include_html:
		wanted.update(ext.lower() for ext in settings.html_extensions)
	skip = set(ignore_dirs if ignore_dirs is not None else settings.ignore_dirs)

	files = set()
	for dirpath, dirnames, filenames in os.walk(root):
		dirnames[:] = [d for d in dirnames if d not in skip]
		for filename in filenames:
			if file_extension(filename) not in wanted:
				continue
			rel_path = os.path.relpath(os.path.join(dirpath, filename), root)
			files.add(to_posix(rel_path))
	return sorted(files)
