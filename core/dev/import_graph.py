"""Internal import graph for layering guardrails.

Parses .py files under ``core/`` with ``ast`` and records edges between
project modules (prefix ``core.``), absolute imports only.
``from core import metrics`` is recorded as an edge to ``core.metrics``.
Used by tests to enforce:
  - No cycles between core modules.
  - Foundation packages never import the module engine.
"""
from __future__ import annotations

import ast
from pathlib import Path
from typing import Dict, List, Set, Tuple

PREFIX = "core"


def _module_name(root: Path, py: Path) -> str:
    parts = list(py.relative_to(root).with_suffix("").parts)
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join([PREFIX, *parts])


def _targets(node: ast.AST) -> List[str]:
    if isinstance(node, ast.Import):
        return [n.name for n in node.names if n.name.startswith(PREFIX + ".")]
    if isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
        if node.module == PREFIX:
            return [f"{PREFIX}.{n.name}" for n in node.names]
        if node.module.startswith(PREFIX + "."):
            return [node.module]
    return []


def build_import_graph(root: str | Path = "core") -> Dict[str, Set[str]]:
    root_path = Path(root)
    edges: Dict[str, Set[str]] = {}
    for py in sorted(root_path.rglob("*.py")):
        if "__pycache__" in py.parts:
            continue
        src = _module_name(root_path, py)
        edges.setdefault(src, set())
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
        for node in ast.walk(tree):
            for dst in _targets(node):
                if dst != src:
                    edges[src].add(dst)
    for n in list(edges):
        for dst in edges[n]:
            edges.setdefault(dst, set())
    return edges


def detect_cycles(graph: Dict[str, Set[str]]) -> List[List[str]]:
    visited: Set[str] = set()
    stack: Set[str] = set()
    cycles: List[List[str]] = []

    def dfs(node: str, path: List[str]) -> None:
        if node in stack:
            if node in path:
                idx = path.index(node)
                cycles.append(path[idx:] + [node])
            return
        if node in visited:
            return
        visited.add(node)
        stack.add(node)
        for nxt in sorted(graph.get(node, ())):
            dfs(nxt, path + [nxt])
        stack.remove(node)

    for n in sorted(graph):
        if n not in visited:
            dfs(n, [n])
    return cycles


def forbidden_edges(
    graph: Dict[str, Set[str]], rules: List[Tuple[str, str]]
) -> List[Tuple[str, str]]:
    found: List[Tuple[str, str]] = []
    for src, targets in graph.items():
        for dst in targets:
            for a, b in rules:
                if src.startswith(a) and dst.startswith(b):
                    found.append((src, dst))
    return sorted(found)


__all__ = [
    "build_import_graph",
    "detect_cycles",
    "forbidden_edges",
]
