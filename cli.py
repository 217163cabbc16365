from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn

import api
from jsgraph import AnalysisError, analyze_codebase, analyze_symbols
from jsgraph.config import get_settings
from jsgraph.logging_config import setup_logging
from jsgraph.summarize import most_referenced, summarize_file_graph, summarize_node, summarize_symbol_graph


logger = logging.getLogger("jsgraph.cli")


def _write(payload: str, output: str) -> None:
	if output == "-":
		print(payload)
		return
	with open(output, "w", encoding="utf-8") as fh:
		fh.write(payload)
	logger.info("Graph written to %s", output)


def cmd_analyze(args: argparse.Namespace) -> None:
	root = os.path.abspath(args.path)
	logger.info("Analyzing codebase at: %s", root)
	graph = analyze_codebase(root)
	logger.info(summarize_file_graph(graph))
	for node in most_referenced(graph, args.top):
		logger.info(summarize_node(node))
	_write(graph.model_dump_json(indent=2), args.output)


def cmd_symbols(args: argparse.Namespace) -> None:
	root = os.path.abspath(args.path)
	logger.info("Extracting symbols at: %s", root)
	graph = analyze_symbols(root)
	logger.info(summarize_symbol_graph(graph))
	_write(graph.model_dump_json(indent=2), args.output)


def cmd_serve(args: argparse.Namespace) -> None:
	if args.path:
		graph = api.load_graph(os.path.abspath(args.path))
		logger.info("Ready: %d files, %d edges", len(graph.nodes), len(graph.edges))
		if args.reload:
			logger.warning("The reloading worker starts empty; POST to /api/analyze to load a graph")
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)


def build_parser() -> argparse.ArgumentParser:
	settings = get_settings()
	parser = argparse.ArgumentParser(prog="jsgraph")
	parser.add_argument("--log-level", default=None, help="Override JSGRAPH_LOG_LEVEL")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Build the file dependency graph and write it as JSON")
	pa.add_argument("path", nargs="?", default=".", help="Path to repository root")
	pa.add_argument("-o", "--output", default="graph.json", help="Output file, '-' for stdout")
	pa.add_argument("--top", type=int, default=5, help="Number of most referenced files to log")
	pa.set_defaults(func=cmd_analyze)

	psym = sub.add_parser("symbols", help="Build the symbol graph and write it as JSON")
	psym.add_argument("path", nargs="?", default=".", help="Path to repository root")
	psym.add_argument("-o", "--output", default="symbols.json", help="Output file, '-' for stdout")
	psym.set_defaults(func=cmd_symbols)

	ps = sub.add_parser("serve", help="Run the FastAPI server")
	ps.add_argument("path", nargs="?", default=None, help="Repository to analyze before serving")
	ps.add_argument("--host", default=settings.host)
	ps.add_argument("--port", type=int, default=settings.port)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)
	return parser


def main(argv=None) -> int:
	args = build_parser().parse_args(argv)
	setup_logging(level=args.log_level)
	try:
		args.func(args)
	except AnalysisError as exc:
		logger.error(str(exc))
		return 2
	return 0


if __name__ == "__main__":
	sys.exit(main())
