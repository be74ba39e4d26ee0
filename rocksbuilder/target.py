"""Target classification.

Turns a platform triple such as ``x86_64-unknown-linux-gnu`` into a
:class:`TargetDescriptor`. Classification never fails: unknown triples
degrade to ``OsFamily.OTHER`` with POSIX-like defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OsFamily(str, Enum):
    LINUX = "linux"
    DARWIN = "darwin"
    IOS = "ios"
    ANDROID = "android"
    WINDOWS_MSVC = "windows-msvc"
    WINDOWS_GNU = "windows-gnu"
    FREEBSD = "freebsd"
    NETBSD = "netbsd"
    OPENBSD = "openbsd"
    DRAGONFLY = "dragonfly"
    AIX = "aix"
    OTHER = "other"


# First match wins. "apple-ios" must precede "darwin" and "android" must
# precede "linux" because android triples also contain "linux".
OS_PATTERNS: tuple[tuple[str, OsFamily], ...] = (
    ("apple-ios", OsFamily.IOS),
    ("darwin", OsFamily.DARWIN),
    ("android", OsFamily.ANDROID),
    ("aix", OsFamily.AIX),
    ("linux", OsFamily.LINUX),
    ("dragonfly", OsFamily.DRAGONFLY),
    ("freebsd", OsFamily.FREEBSD),
    ("netbsd", OsFamily.NETBSD),
    ("openbsd", OsFamily.OPENBSD),
    ("windows", OsFamily.WINDOWS_GNU),
)

BIG_ENDIAN_ARCHES = frozenset({
    "powerpc", "powerpc64", "s390x", "sparc", "sparc64", "sparcv9",
    "mips", "mips64", "m68k", "armebv7r", "aarch64_be",
})


@dataclass(frozen=True)
class TargetDescriptor:
    raw: str
    architecture: str
    abi_segments: tuple[str, ...]
    os_family: OsFamily
    pointer_width: int
    endianness: str

    @property
    def is_windows(self) -> bool:
        return self.os_family in (OsFamily.WINDOWS_MSVC, OsFamily.WINDOWS_GNU)

    def segment(self, index: int) -> str | None:
        """Dash-separated segment ``index`` of the raw triple, or None when absent."""
        segments = self.raw.split("-")
        if 0 <= index < len(segments):
            return segments[index]
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "raw": self.raw,
            "architecture": self.architecture,
            "abi_segments": list(self.abi_segments),
            "os_family": self.os_family.value,
            "pointer_width": self.pointer_width,
            "endianness": self.endianness,
        }


def classify_os(raw: str) -> OsFamily:
    for pattern, family in OS_PATTERNS:
        if pattern in raw:
            if family is OsFamily.WINDOWS_GNU and "msvc" in raw:
                return OsFamily.WINDOWS_MSVC
            return family
    return OsFamily.OTHER


# Architectures whose width the name does not give away.
POINTER_WIDTHS = {
    "s390x": 64,
    "sparcv9": 64,
}

# ILP32 ABIs on 64-bit architectures.
ILP32_ABIS = ("gnux32", "muslx32", "gnuabin32", "gnu_ilp32", "gnu_ilp32be")


def _default_pointer_width(arch: str, abi: str = "") -> int:
    if abi in ILP32_ABIS:
        return 32
    if arch in POINTER_WIDTHS:
        return POINTER_WIDTHS[arch]
    if "64" in arch:
        return 64
    return 32


def _default_endianness(arch: str) -> str:
    if arch in BIG_ENDIAN_ARCHES:
        return "big"
    return "little"


def classify(raw: str, pointer_width: str | int | None = None, endianness: str | None = None) -> TargetDescriptor:
    """Classify a platform triple.

    Reported ``pointer_width`` and ``endianness`` values (as the build host
    exposes them) take precedence over what the architecture name implies.
    """
    raw = (raw or "").strip()
    segments = raw.split("-")
    architecture = segments[0]

    width = _default_pointer_width(architecture, segments[-1] if len(segments) > 1 else "")
    if pointer_width not in (None, ""):
        try:
            width = int(pointer_width)
        except (TypeError, ValueError):
            pass

    endian = _default_endianness(architecture)
    if endianness in ("little", "big"):
        endian = endianness

    return TargetDescriptor(
        raw=raw,
        architecture=architecture,
        abi_segments=tuple(segments[1:]),
        os_family=classify_os(raw),
        pointer_width=width,
        endianness=endian,
    )
