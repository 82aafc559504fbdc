from importlib import import_module, util

__all__ = ["available_backends", "load_adapter"]

# backend -> (module that must be importable, adapter submodule, adapter class)
_BACKENDS = {
    "networkx": ("networkx", ".networkx", "NetworkXAdapter"),
    "polars": ("polars", ".dataframe_adapter", "DataFrameAdapter"),
}


def _installed(modname: str) -> bool:
    return util.find_spec(modname) is not None


def available_backends() -> dict:
    """Map each adapter name to whether its third-party library can be imported."""
    return {name: _installed(required) for name, (required, _, _) in _BACKENDS.items()}


def load_adapter(name: str, *args, **kwargs):
    """
    Instantiate the adapter registered under ``name``.

    Extra arguments go to the adapter constructor.

    Raises
    ------
    ValueError
        If ``name`` is not a known backend.
    ModuleNotFoundError
        If the backend's library is not installed.
    """
    try:
        required, submodule, class_name = _BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown adapter '{name}'; choose one of {sorted(_BACKENDS)}"
        ) from None
    if not _installed(required):
        raise ModuleNotFoundError(
            f"Optional backend '{name}' is not installed. "
            f"Install with `pip install dwgraph[{name}]`."
        )
    module = import_module(submodule, __name__)
    return getattr(module, class_name)(*args, **kwargs)
