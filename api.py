from __future__ import annotations

import logging
import os
from typing import NamedTuple, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from jsgraph import AnalysisError, PathEscapeError, analyze_codebase, analyze_symbols, read_source
from jsgraph.model import FileGraph, SymbolGraph


logger = logging.getLogger(__name__)

app = FastAPI(title="JS Graph Analyzer")


class AnalyzeRequest(BaseModel):
	path: Optional[str] = None


class FileContent(BaseModel):
	path: str
	content: str
	total_lines: int


class LatestAnalysis(NamedTuple):
	root: str
	graph: FileGraph


class GraphStore:
	"""The most recent file graph, replaced whole on every analysis."""

	def __init__(self) -> None:
		self.latest: Optional[LatestAnalysis] = None

	def replace(self, root: str, graph: FileGraph) -> None:
		# single assignment, so readers never see a root/graph mismatch
		self.latest = LatestAnalysis(root=root, graph=graph)

	def clear(self) -> None:
		self.latest = None


store = GraphStore()


def _target_root(req: AnalyzeRequest, use_cached: bool = False) -> str:
	"""Root named by the request, else the cached root when *use_cached*, else cwd."""
	if req.path:
		return os.path.abspath(req.path)
	if use_cached and store.latest is not None:
		return store.latest.root
	return os.getcwd()


def load_graph(root: str) -> FileGraph:
	"""Analyze *root* and make its graph the cached one."""
	logger.info("Analyzing: %s", root)
	graph = analyze_codebase(root)
	store.replace(root, graph)
	return graph


@app.post("/api/analyze", response_model=FileGraph)
def analyze(req: AnalyzeRequest) -> FileGraph:
	try:
		return load_graph(_target_root(req))
	except AnalysisError as exc:
		raise HTTPException(status_code=400, detail=str(exc))


@app.get("/api/graph", response_model=FileGraph)
def cached_graph() -> FileGraph:
	latest = store.latest
	if latest is None:
		raise HTTPException(status_code=404, detail="No graph loaded. POST to /api/analyze first.")
	return latest.graph


@app.post("/api/symbols", response_model=SymbolGraph)
def symbols(req: AnalyzeRequest) -> SymbolGraph:
	root = _target_root(req, use_cached=True)
	try:
		return analyze_symbols(root)
	except AnalysisError as exc:
		raise HTTPException(status_code=400, detail=str(exc))


@app.get("/api/file", response_model=FileContent)
def file_content(path: str) -> FileContent:
	latest = store.latest
	if latest is None:
		raise HTTPException(status_code=404, detail="No graph loaded. POST to /api/analyze first.")
	try:
		content = read_source(latest.root, path)
	except PathEscapeError as exc:
		raise HTTPException(status_code=403, detail=str(exc))
	except AnalysisError as exc:
		raise HTTPException(status_code=400, detail=str(exc))
	except OSError:
		raise HTTPException(status_code=404, detail=f"File not found: {path}")
	return FileContent(path=path, content=content, total_lines=content.count("\n") + 1)


def create_app() -> FastAPI:
	return app
