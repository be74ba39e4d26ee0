import os
from dataclasses import dataclass

from .errors import ConfigurationConflict
from .overrides import OverrideMap
from .target import OsFamily, TargetDescriptor

MSVC_LIKE = {"cl", "clang-cl"}


@dataclass(frozen=True)
class Compiler:
    path: str

    @property
    def stem(self):
        name = os.path.basename(self.path.replace("\\", "/")).lower()
        if name.endswith(".exe"):
            name = name[:-4]
        return name

    @property
    def is_like_msvc(self):
        return self.stem in MSVC_LIKE

    @property
    def is_like_clang(self):
        return "clang" in self.stem


def default_compiler(target: TargetDescriptor):
    if target.os_family is OsFamily.WINDOWS_MSVC:
        return "cl.exe"
    return "c++"


def detect_compiler(target: TargetDescriptor, overrides: OverrideMap):
    """The C++ compiler named by ``CXX``, or the platform default."""
    return Compiler(overrides.value("CXX", default_compiler(target)))


def check_lto(compiler: Compiler):
    # https://github.com/facebook/rocksdb/blob/be7703b27d9b3ac458641aaadf27042d86f6869c/Makefile#L195
    if not compiler.is_like_clang:
        raise ConfigurationConflict(
            "LTO is only supported with clang.",
            hint="Either disable the `lto` feature or set `CC=/usr/bin/clang CXX=/usr/bin/clang++` environment variables.",
            context={"compiler": compiler.path},
        )
