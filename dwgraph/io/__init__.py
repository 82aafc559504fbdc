from .text import dumps, from_text, loads, to_text

__all__ = ["dumps", "loads", "to_text", "from_text"]
