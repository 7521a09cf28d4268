"""Typed errors raised by the neighborhood CF core."""

from __future__ import annotations


class NotFoundError(KeyError):
    """An unknown user_id / item_id (or a missing rating) was referenced."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class EmptyCorpusError(RuntimeError):
    """A query was issued before any ratings were loaded."""
