# dwgraph/__init__.py
"""dwgraph: generic directed weighted multigraph, single import."""
from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    # namespaces
    "adapters": "dwgraph.adapters",
    "io": "dwgraph.io",
    "core": "dwgraph.core",
    "utils": "dwgraph.utils",
    # adapter modules (direct convenience)
    "networkx": "dwgraph.adapters.networkx",
    "dataframe": "dwgraph.adapters.dataframe_adapter",
    # io modules
    "textio": "dwgraph.io.text",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Core
    "Graph": ("dwgraph.core.graph", "Graph"),
    "Edge": ("dwgraph.core.edge", "Edge"),
    "EdgeValue": ("dwgraph.core.edge", "EdgeValue"),
    "EdgeKind": ("dwgraph.core.structure", "EdgeKind"),
    "Cursor": ("dwgraph.core.cursor", "Cursor"),
    "GraphError": ("dwgraph.core.errors", "GraphError"),
    "NodeNotFound": ("dwgraph.core.errors", "NodeNotFound"),
    "GraphInvariantError": ("dwgraph.core.errors", "GraphInvariantError"),

    # Canonical text I/O
    "to_text": ("dwgraph.io.text", "to_text"),
    "from_text": ("dwgraph.io.text", "from_text"),

    # NetworkX adapter (optional dependency)
    "to_nx": ("dwgraph.adapters.networkx", "to_nx"),
    "from_nx": ("dwgraph.adapters.networkx", "from_nx"),

    # Polars DataFrames
    "to_dataframes": ("dwgraph.adapters.dataframe_adapter", "to_dataframes"),
    "from_dataframes": ("dwgraph.adapters.dataframe_adapter", "from_dataframes"),

    # Validation
    "validate": ("dwgraph.utils.validation", "validate"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("dwgraph")
except PackageNotFoundError:
    __version__ = "0.0.0"
