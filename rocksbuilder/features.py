"""Feature flags and per-dependency system-vs-bundled decisions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .cli_logger import logger
from .overrides import OverrideMap
from .target import OsFamily, TargetDescriptor

KNOWN_FEATURES = frozenset({
    "snappy", "lz4", "zstd", "zlib", "bzip2",
    "rtti", "lto", "jemalloc", "io-uring", "mt_static",
})

DEFAULT_FEATURES = frozenset({"snappy", "lz4", "zstd", "zlib", "bzip2"})

# Optional dependencies: environment prefix -> enabling feature.
DEPENDENCIES = {
    "SNAPPY": "snappy",
    "LZ4": "lz4",
    "ZSTD": "zstd",
    "ZLIB": "zlib",
    "BZIP2": "bzip2",
    "JEMALLOC": "jemalloc",
}

TOP_LEVEL = "ROCKSDB"

# On these platforms jemalloc-sys builds a prefixed jemalloc which cannot be
# linked together with RocksDB. Matched as substrings of the raw triple.
NO_JEMALLOC_TARGETS = ("android", "dragonfly", "musl", "darwin")

SYSTEM_ONLY_LIB_DIR = "/usr/local/lib"


class FeatureSet(frozenset):
    """Immutable set of enabled feature names."""

    @classmethod
    def parse(cls, names: Iterable[str] | str | None) -> "FeatureSet":
        """Build a feature set from names or a comma-separated string.

        ``None`` yields the default features. Unknown names raise ValueError.
        """
        if names is None:
            return cls(DEFAULT_FEATURES)
        if isinstance(names, str):
            names = [n for n in names.split(",")]
        cleaned = {n.strip() for n in names if n and n.strip()}
        unknown = sorted(cleaned - KNOWN_FEATURES)
        if unknown:
            raise ValueError(
                f"Unknown feature(s): {', '.join(unknown)}. "
                f"Known features: {', '.join(sorted(KNOWN_FEATURES))}"
            )
        return cls(cleaned)


class DecisionKind(str, Enum):
    SKIP = "skip"
    LINK_SYSTEM = "link-system"
    BUILD_BUNDLED = "build-bundled"


@dataclass(frozen=True)
class DependencyDecision:
    name: str
    kind: DecisionKind
    search_path: str | None = None
    static: bool = False
    reason: str = ""
    force_compiled: bool = False
    system_only: bool = False

    @classmethod
    def skip(cls, name, reason):
        return cls(name, DecisionKind.SKIP, reason=reason)

    @classmethod
    def link_system(cls, name, search_path, static, reason="discovered"):
        return cls(name, DecisionKind.LINK_SYSTEM, search_path=search_path, static=static, reason=reason)

    @classmethod
    def build_bundled(cls, name, reason="no system library", force_compiled=False):
        return cls(name, DecisionKind.BUILD_BUNDLED, reason=reason, force_compiled=force_compiled)

    @property
    def is_skip(self) -> bool:
        return self.kind is DecisionKind.SKIP

    @property
    def is_link_system(self) -> bool:
        return self.kind is DecisionKind.LINK_SYSTEM

    @property
    def is_bundled(self) -> bool:
        return self.kind is DecisionKind.BUILD_BUNDLED

    @property
    def library_name(self) -> str:
        return self.name.lower()

    @property
    def link_mode(self) -> str:
        return "static" if self.static else "dylib"

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"name": self.name, "decision": self.kind.value, "reason": self.reason}
        if self.is_link_system:
            data["search_path"] = self.search_path
            data["static"] = self.static
        return data


def jemalloc_excluded(target: TargetDescriptor) -> bool:
    return any(pattern in target.raw for pattern in NO_JEMALLOC_TARGETS)


def _discover(name: str, overrides: OverrideMap) -> DependencyDecision:
    if overrides.is_truthy(f"{name}_COMPILE"):
        return DependencyDecision.build_bundled(name, reason=f"{name}_COMPILE is set", force_compiled=True)

    lib_dir = overrides.lookup(f"{name}_LIB_DIR")
    if lib_dir is not None:
        return DependencyDecision.link_system(name, lib_dir, overrides.is_set(f"{name}_STATIC"))

    return DependencyDecision.build_bundled(name)


def decide(name: str, features: FeatureSet, overrides: OverrideMap, target: TargetDescriptor) -> DependencyDecision:
    """Decide how optional dependency ``name`` (e.g. ``"SNAPPY"``) is provided."""
    feature = DEPENDENCIES[name]
    if name == "JEMALLOC" and jemalloc_excluded(target):
        decision = DependencyDecision.skip(name, f"jemalloc cannot be linked with RocksDB on {target.raw}")
    elif feature not in features:
        decision = DependencyDecision.skip(name, f"feature '{feature}' disabled")
    else:
        decision = _discover(name, overrides)
    logger.info(f"  - {name}: {decision.kind.value} ({decision.reason})")
    return decision


def decide_top_level(overrides: OverrideMap, target: TargetDescriptor) -> DependencyDecision:
    """Decide how RocksDB itself is provided.

    On FreeBSD the system library is always used: when discovery does not
    find one through ``ROCKSDB_LIB_DIR``, ``/usr/local/lib`` is assumed and
    the bundled build is never attempted.
    """
    decision = _discover(TOP_LEVEL, overrides)
    if decision.is_bundled and target.os_family is OsFamily.FREEBSD:
        decision = DependencyDecision(
            TOP_LEVEL,
            DecisionKind.LINK_SYSTEM,
            search_path=SYSTEM_ONLY_LIB_DIR,
            static=overrides.is_set(f"{TOP_LEVEL}_STATIC"),
            reason="rocksdb only works with the prebuilt system library on freebsd",
            force_compiled=decision.force_compiled,
            system_only=True,
        )
    logger.info(f"  - {TOP_LEVEL}: {decision.kind.value} ({decision.reason})")
    return decision


def decide_all(features: FeatureSet, overrides: OverrideMap, target: TargetDescriptor) -> dict[str, DependencyDecision]:
    return {name: decide(name, features, overrides, target) for name in DEPENDENCIES}
