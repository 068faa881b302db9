"""Errors raised while assembling the run configuration; the CLI exits with 2 on them."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """A flag or environment value cannot be used for a recount."""


class MissingConfigurationError(ConfigurationError):
    """One or more required values are absent or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
