from .validation import canonical_hash, validate

__all__ = ["validate", "canonical_hash"]
