"""Compose the list of RocksDB translation units for a target."""

from __future__ import annotations

from importlib import resources

from .features import DependencyDecision
from .target import TargetDescriptor

MASTER_LIST = "rocksdb_lib_sources.txt"

# util/build_version.cc is generated by RocksDB's own build; a pre-generated
# copy lives at the project root instead.
BUILD_VERSION_SOURCE = "util/build_version.cc"
BUILD_VERSION_SUBSTITUTE = "build_version.cc"

POSIX_SOURCES = (
    "port/port_posix.cc",
    "env/env_posix.cc",
    "env/fs_posix.cc",
    "env/io_posix.cc",
)

WINDOWS_SOURCES = (
    "port/win/env_default.cc",
    "port/win/env_win.cc",
    "port/win/io_win.cc",
    "port/win/port_win.cc",
    "port/win/win_logger.cc",
    "port/win/win_thread.cc",
)

WINDOWS_JEMALLOC_SOURCE = "port/win/win_jemalloc.cc"


def parse_source_list(text):
    return [line.strip() for line in text.strip().split("\n") if line.strip()]


def load_master_list():
    """Read the bundled master list of RocksDB library sources."""
    text = resources.files("rocksbuilder").joinpath("data").joinpath(MASTER_LIST).read_text(encoding="utf-8")
    return parse_source_list(text)


def compose(master_list, target: TargetDescriptor, jemalloc: DependencyDecision | None = None):
    """Apply the platform removal/addition rules to ``master_list``.

    Paths are relative to the RocksDB source tree. Removals match exact
    paths; the result keeps master-list order with additions appended and
    never contains a path twice.
    """
    removed = {BUILD_VERSION_SOURCE}
    added = []

    if target.is_windows:
        removed.update(POSIX_SOURCES)
        added.extend(WINDOWS_SOURCES)
        if jemalloc is not None and jemalloc.is_bundled:
            added.append(WINDOWS_JEMALLOC_SOURCE)

    kept = [f for f in master_list if f not in removed]
    return list(dict.fromkeys(kept + added))


def compilation_units(composed, root="rocksdb"):
    """Source paths as handed to the compiler, relative to the source root."""
    units = [f"{root}/{f}" for f in composed]
    units.append(BUILD_VERSION_SUBSTITUTE)
    return units
