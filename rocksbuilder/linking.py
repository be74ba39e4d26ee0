"""Link directives for the resolved plan."""

from __future__ import annotations

from typing import Mapping

from .features import DEPENDENCIES, DependencyDecision, FeatureSet
from .overrides import OverrideMap
from .plan import LinkDirective
from .target import TargetDescriptor

# C++ runtime per platform, first match on the raw triple wins.
# https://github.com/alexcrichton/cc-rs/blob/master/src/lib.rs#L2189
CXX_RUNTIMES = (
    ("apple", ("c++",)),
    ("freebsd", ("c++",)),
    ("openbsd", ("c++",)),
    ("linux", ("stdc++",)),
    ("aix", ("c++", "c++abi")),
)

WINDOWS_SYSTEM_LIBS = ("rpcrt4", "shlwapi")


def cpp_runtime(target: TargetDescriptor, overrides: OverrideMap):
    """Runtime directives needed when RocksDB comes from a system library."""
    stdlib = overrides.lookup("CXXSTDLIB")
    if stdlib:
        return [LinkDirective(stdlib)]
    for pattern, names in CXX_RUNTIMES:
        if pattern in target.raw:
            return [LinkDirective(name) for name in names]
    return []


def bundled_system_libs(target: TargetDescriptor, features: FeatureSet):
    """System libraries the bundled RocksDB archive depends on."""
    libs = []
    if target.segment(2) == "windows":
        libs.extend(LinkDirective(name) for name in WINDOWS_SYSTEM_LIBS)
    if "io-uring" in features and "linux" in target.raw:
        libs.append(LinkDirective("uring"))
    if "riscv64gc" in target.raw:
        # libatomic is required on riscv64gc
        libs.append(LinkDirective("atomic"))
    return libs


def system_directive(decision: DependencyDecision):
    return LinkDirective(decision.library_name, decision.link_mode, decision.search_path)


def assemble(
    top_level: DependencyDecision,
    decisions: Mapping[str, DependencyDecision],
    target: TargetDescriptor,
    overrides: OverrideMap,
    features: FeatureSet = FeatureSet(),
    out_dir: str | None = None,
):
    """Order: system-linked dependencies, RocksDB, then what RocksDB needs.

    The C++ runtime is only linked explicitly for a system RocksDB; the
    bundled build gets it from the compiler driver. The FreeBSD system-only
    carve-out links RocksDB and nothing else.
    """
    if top_level.system_only:
        return [system_directive(top_level)]

    directives = []
    for name in DEPENDENCIES:
        decision = decisions.get(name)
        if decision is not None and decision.is_link_system:
            directives.append(system_directive(decision))

    if top_level.is_link_system:
        directives.append(system_directive(top_level))
        directives.extend(cpp_runtime(target, overrides))
    else:
        directives.append(LinkDirective(top_level.library_name, "static", out_dir))
        directives.extend(bundled_system_libs(target, features))

    snappy = decisions.get("SNAPPY")
    if snappy is not None and snappy.is_bundled:
        directives.append(LinkDirective(snappy.library_name, "static", out_dir))
    return directives
