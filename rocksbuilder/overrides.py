"""Environment-over-default value resolution.

Every configurable path or toolchain value has a hardcoded default. The
environment snapshot handed to :class:`OverrideMap` always wins; the
discrepancy, the agreement or the fallback is logged and recorded so it can
be surfaced to the build host. Lookups never fail.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .cli_logger import logger
from .errors import OverrideMismatch


class Provenance(str, Enum):
    ENVIRONMENT = "environment"
    DEFAULT = "default"


# Toolchain locations of the reference development shell.
DEFAULT_GLIBC_DEV = "/nix/store/gf3wh0x0rzb1dkx0wx1jvmipydwfzzd5-glibc-2.40-66-dev"
DEFAULT_GCC_PATH = "/nix/store/82kmz7r96navanrc2fgckh2bamiqrgsw-gcc-14.3.0"
DEFAULT_LIBCLANG_PATH = "/nix/store/10mkp77lmqz8x2awd8hzv6pf7f7rkf6d-clang-19.1.7-lib/lib"
DEFAULT_LLVM_PREFIX = "/nix/store/nasb2hacyvikadjhr9qip2r8b72ir819-llvm-19.1.7"

DEFAULTS: dict[str, str] = {
    "GLIBC_DEV": DEFAULT_GLIBC_DEV,
    "GCC_PATH": DEFAULT_GCC_PATH,
    "GCC_VERSION": "14.3.0",
    "LIBCLANG_PATH": DEFAULT_LIBCLANG_PATH,
    "LLVM_CONFIG_PATH": f"{DEFAULT_LLVM_PREFIX}/lib",
    "LLVM_CONFIG": f"{DEFAULT_LLVM_PREFIX}/bin/llvm-config",
    "CLANG_VERSION": "19",
    "ROCKSDB_INCLUDE_DIR": "rocksdb/include",
}


@dataclass(frozen=True)
class ResolvedValue:
    name: str
    value: str
    provenance: Provenance


class OverrideMap:
    """Explicit stand-in for the process environment.

    ``env`` is a snapshot taken once by the caller; nothing here reads
    ``os.environ``. ``defaults`` are layered over :data:`DEFAULTS`.
    """

    def __init__(self, env: Mapping[str, str] | None = None, defaults: Mapping[str, str] | None = None):
        self._env = dict(env or {})
        self._defaults = dict(DEFAULTS)
        if defaults:
            self._defaults.update(defaults)
        self._resolved: dict[tuple[str, str], ResolvedValue] = {}
        self.diagnostics: list[str] = []
        self.mismatches: list[OverrideMismatch] = []

    def resolve(self, name: str, default: str | None = None) -> ResolvedValue:
        """Resolve ``name`` against the environment, falling back to ``default``.

        Resolutions are memoised per ``(name, default)`` so diagnostics are
        emitted once per run. Names with an empty default are optional
        inputs: their absence is only logged at debug level and their
        presence is recorded without being treated as a mismatch.
        """
        if default is None:
            default = self._defaults.get(name, "")
        key = (name, default)
        if key in self._resolved:
            return self._resolved[key]

        value = self._env.get(name)
        message = None
        if value is None:
            if default:
                message = f"{name} not set in the environment, using default: {default}"
                logger.info(message)
            else:
                logger.debug(f"{name} not set in the environment")
            resolved = ResolvedValue(name, default, Provenance.DEFAULT)
        elif not default:
            message = f"{name} set in the environment: {value}"
            logger.info(message)
            resolved = ResolvedValue(name, value, Provenance.ENVIRONMENT)
        elif value != default:
            mismatch = OverrideMismatch(name, value, default)
            logger.warning(str(mismatch).splitlines()[0])
            self.mismatches.append(mismatch)
            message = f"{name} from environment ({value}) differs from default ({default})"
            resolved = ResolvedValue(name, value, Provenance.ENVIRONMENT)
        else:
            message = f"{name} from environment matches default: {value}"
            logger.info(message)
            resolved = ResolvedValue(name, value, Provenance.ENVIRONMENT)

        if message is not None:
            self.diagnostics.append(message)
        self._resolved[key] = resolved
        return resolved

    def value(self, name: str, default: str | None = None) -> str:
        return self.resolve(name, default).value

    def lookup(self, name: str) -> str | None:
        """Optional input with no default: its value when set in the environment, else None."""
        resolved = self.resolve(name, "")
        if resolved.provenance is Provenance.ENVIRONMENT:
            return resolved.value
        return None

    def get(self, name: str) -> str | None:
        """Raw lookup for values the build host itself reports (target facts, output paths)."""
        return self._env.get(name)

    def is_set(self, name: str) -> bool:
        return self.lookup(name) is not None

    def is_truthy(self, name: str) -> bool:
        value = self.lookup(name)
        if value is None:
            return False
        return value.lower() == "true" or value == "1"

    def resolved(self) -> dict[str, ResolvedValue]:
        """Latest resolution per name, in resolution order."""
        return {name: resolved for (name, _), resolved in self._resolved.items()}
