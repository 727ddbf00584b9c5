"""Exception hierarchy shared across the calculator, draft and store layers."""

from __future__ import annotations


class BoardrentError(Exception):
    """Base class for all errors raised by :mod:`boardrent`."""


class ConfigError(BoardrentError):
    """Raised when runtime configuration is incomplete or contradictory."""


class DraftError(BoardrentError):
    """Raised when a contract draft payload or update is invalid."""


class InstallmentError(BoardrentError):
    """Raised when a payment plan cannot be built for the requested total."""


class StoreError(BoardrentError):
    """Raised when a call to the backing database fails."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"{table}: {message}")
        self.table = table


__all__ = ["BoardrentError", "ConfigError", "DraftError", "InstallmentError", "StoreError"]
