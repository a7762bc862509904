"""Exception types shared across ReleaseVault.

Every error carries an :class:`ErrorCode`, an optional :class:`ErrorContext`
with primitive-only extra data, and the exception that caused it, if any.

Parsing and matching never raise for bad input. Errors in this module are
raised at configuration-load boundaries and for invalid internal values.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for ReleaseVault.

    Codes are grouped by the layer that raises them. The string value is
    what ends up in logs and in ``to_dict`` output.
    """

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Parsing Errors
    PARSING_ERROR = "PARSING_ERROR"
    EXTRACTOR_FAILED = "EXTRACTOR_FAILED"
    STRATEGY_FAILED = "STRATEGY_FAILED"

    # Configuration Errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"
    UNKNOWN_QUALITY = "UNKNOWN_QUALITY"
    INVALID_PATTERN = "INVALID_PATTERN"

    # Provider Errors
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"

    # Rate Limiting
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"

    # Processing
    DATA_PROCESSING_ERROR = "DATA_PROCESSING_ERROR"
    OPERATION_CANCELLED = "OPERATION_CANCELLED"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Flatten ``additional_data`` so it survives JSON logging.

    Paths become strings, enums their value and decimals floats. Anything
    else that is not already a str/int/float/bool raises ``TypeError``.
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        raise TypeError(f"additional_data expects a mapping, not {type(value).__name__}")

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            raise TypeError(f"additional_data[{key!r}] has unsupported type {type(val).__name__}")

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Where an error happened.

    ``operation`` names the call that failed, ``source`` is the config file
    or provider involved. ``additional_data`` is flattened to primitives on
    construction.
    """

    operation: str | None = None
    source: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            object.__setattr__(self, "additional_data", _coerce_primitives(self.additional_data))

    def safe_dict(self) -> dict[str, Any]:
        """Populated fields plus ``additional_data`` (empty dict when unset)."""
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.source is not None:
            data["source"] = self.source
        data["additional_data"] = dict(self.additional_data or {})
        return data


class ReleaseVaultError(Exception):
    """Root of the ReleaseVault exception tree.

    ``str(error)`` is ``"<CODE>: <message>"``; the causing exception, when
    there is one, is kept on ``original_error``.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form used by the structured logger."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(ReleaseVaultError):
    """Domain-specific errors.

    Raised when business rules are violated, e.g. an invalid value handed
    to a domain model by calling code.
    """


class InfrastructureError(ReleaseVaultError):
    """Errors from external collaborators (catalog providers, files)."""


class ProviderError(InfrastructureError):
    """A catalog provider failed to answer a lookup.

    The title matcher never propagates these; they are recorded on the
    match outcome and the remaining providers are still consulted.
    """


class ApplicationError(ReleaseVaultError):
    """Application-level errors (configuration, library usage)."""


class ConfigurationError(ApplicationError):
    """Invalid or missing configuration.

    Raised eagerly when settings, quality profiles or custom formats are
    loaded. Never raised while parsing or scoring.
    """


def create_config_error(
    message: str,
    field: str | None = None,
    source: str | None = None,
    original_error: Exception | None = None,
) -> ConfigurationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation="load_configuration",
        source=source,
        additional_data=additional_data,
    )
    return ConfigurationError(
        ErrorCode.CONFIG_INVALID,
        message,
        context,
        original_error,
    )


def create_provider_error(
    provider: str,
    term: str,
    original_error: Exception | None = None,
) -> ProviderError:
    """Create a provider lookup error with context."""
    context = ErrorContext(
        operation="catalog_lookup",
        source=provider,
        additional_data={"term": term},
    )
    return ProviderError(
        ErrorCode.PROVIDER_ERROR,
        f"Catalog provider '{provider}' failed for '{term}': {original_error}",
        context,
        original_error,
    )


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "DomainError",
    "ErrorCode",
    "ErrorContext",
    "InfrastructureError",
    "PrimitiveContextValue",
    "ProviderError",
    "ReleaseVaultError",
    "create_config_error",
    "create_provider_error",
]
