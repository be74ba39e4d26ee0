"""Error taxonomy for plan resolution, with stable machine-readable codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class ErrorCode(str, Enum):
    PRECONDITION = "E_PRECONDITION"
    CONFIGURATION = "E_CONFIGURATION"
    PROVISIONING = "E_PROVISIONING"
    OVERRIDE_MISMATCH = "E_OVERRIDE_MISMATCH"
    BINDING = "E_BINDING"


class RocksBuilderError(Exception):
    """Base error carrying a code, an optional hint and string context."""

    fatal = True

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        for k, v in self.context.items():
            if v:
                parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class PreconditionMissing(RocksBuilderError):
    """A bundled source tree or required header is absent."""

    def __init__(self, message: str, *, hint: str | None = None, context: Mapping[str, str] | None = None) -> None:
        super().__init__(message, code=ErrorCode.PRECONDITION, hint=hint, context=context)


class ConfigurationConflict(RocksBuilderError):
    """A requested feature needs a toolchain capability that is not available."""

    def __init__(self, message: str, *, hint: str | None = None, context: Mapping[str, str] | None = None) -> None:
        super().__init__(message, code=ErrorCode.CONFIGURATION, hint=hint, context=context)


class ProvisioningFailure(RocksBuilderError):
    """The external source fetch step failed, was killed, or could not start."""

    def __init__(self, message: str, *, hint: str | None = None, context: Mapping[str, str] | None = None) -> None:
        super().__init__(message, code=ErrorCode.PROVISIONING, hint=hint, context=context)


class BindingGenerationFailure(RocksBuilderError):
    """The external binding generator exited non-zero or could not start."""

    def __init__(self, message: str, *, hint: str | None = None, context: Mapping[str, str] | None = None) -> None:
        super().__init__(message, code=ErrorCode.BINDING, hint=hint, context=context)


class OverrideMismatch(RocksBuilderError):
    """An environment value disagrees with its default.

    Recorded as a diagnostic by the override resolver, never raised out of it.
    """

    fatal = False

    def __init__(self, name: str, value: str, default: str) -> None:
        super().__init__(
            f"{name} from the environment ({value}) differs from the default ({default}); using the environment value.",
            code=ErrorCode.OVERRIDE_MISMATCH,
            context={"name": name, "environment": value, "default": default},
        )


__all__ = [
    "BindingGenerationFailure",
    "ConfigurationConflict",
    "ErrorCode",
    "OverrideMismatch",
    "PreconditionMissing",
    "ProvisioningFailure",
    "RocksBuilderError",
]
