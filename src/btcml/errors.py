"""Error taxonomy shared by the data preparation and evaluation layers."""

from __future__ import annotations


class BtcmlError(Exception):
    """Base class for all btcml errors."""


class SchemaError(BtcmlError, KeyError):
    """A source table is missing an expected column or key."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep the plain text.
        return str(self.args[0]) if self.args else ""


class JoinIntegrityError(BtcmlError):
    """A source table has duplicate join keys, making the join ambiguous."""


class ConfigurationError(BtcmlError, ValueError):
    """Split fraction or window parameters produce an empty or invalid partition."""


class DefinitionError(BtcmlError, ArithmeticError):
    """A metric is mathematically undefined for the given inputs."""


class DataQualityWarning(UserWarning):
    """A column still holds nulls after filling."""


__all__ = [
    "BtcmlError",
    "ConfigurationError",
    "DataQualityWarning",
    "DefinitionError",
    "JoinIntegrityError",
    "SchemaError",
]
