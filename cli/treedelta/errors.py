from typing import List, Optional


class TreeDeltaError(Exception):
    """Base class for tree-delta errors."""


class DataIntegrityError(TreeDeltaError, KeyError):
    """A snapshot or connection references an id the passive tree does not know."""

    def __init__(self, kind: str, ident: str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"unknown {kind} id: {ident!r}")

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return self.args[0]


class EmptyBoundsError(TreeDeltaError, ValueError):
    """Bounds were requested over an empty node set."""


class TreeFormatError(TreeDeltaError, ValueError):
    def __init__(self, source: str, errors: Optional[List[str]] = None):
        self.source = source
        self.errors = list(errors or [])
        detail = "; ".join(self.errors) if self.errors else "invalid data"
        super().__init__(f"{source}: {detail}")


class ConfigError(TreeDeltaError):
    """Configuration-related error."""
