"""Preprocessor defines, include search path and compiler flags for RocksDB."""

from __future__ import annotations

from typing import Mapping

from .features import DependencyDecision, FeatureSet
from .overrides import OverrideMap
from .target import OsFamily, TargetDescriptor

POSIX = (("ROCKSDB_PLATFORM_POSIX", None), ("ROCKSDB_LIB_IO_POSIX", None))

# One entry per OS family; classification already picked the first match
# in priority order, so exactly one marker block applies per target.
PLATFORM_DEFINES = {
    OsFamily.IOS: (
        ("OS_MACOSX", None),
        ("IOS_CROSS_COMPILE", None),
        ("PLATFORM", "IOS"),
        ("NIOSTATS_CONTEXT", None),
        ("NPERF_CONTEXT", None),
    ) + POSIX,
    OsFamily.DARWIN: (("OS_MACOSX", None),) + POSIX,
    OsFamily.ANDROID: (("OS_ANDROID", None),) + POSIX,
    OsFamily.AIX: (("OS_AIX", None),) + POSIX,
    OsFamily.LINUX: (("OS_LINUX", None),) + POSIX + (("ROCKSDB_SCHED_GETCPU_PRESENT", None),),
    OsFamily.DRAGONFLY: (("OS_DRAGONFLYBSD", None),) + POSIX,
    OsFamily.FREEBSD: (("OS_FREEBSD", None),) + POSIX,
    OsFamily.NETBSD: (("OS_NETBSD", None),) + POSIX,
    OsFamily.OPENBSD: (("OS_OPENBSD", None),) + POSIX,
}

WINDOWS_DEFINES = (
    ("DWIN32", None),
    ("OS_WIN", None),
    ("_MBCS", None),
    ("WIN64", None),
    ("NOMINMAX", None),
    ("ROCKSDB_WINDOWS_UTF8_FILENAMES", None),
)

MINGW_TARGET = "x86_64-pc-windows-gnu"
MINGW_DEFINES = (
    # localtime_r wrapper over localtime_s.
    ("_POSIX_C_SOURCE", "1"),
    # Vista headers are the minimum RocksDB supports.
    ("_WIN32_WINNT", "_WIN32_WINNT_VISTA"),
)

# The only target that keeps 32-bit file offsets.
ANDROID_ARMV7 = "armv7-linux-androideabi"

CODECS = (
    ("snappy", "SNAPPY", None),
    ("lz4", "LZ4", "DEP_LZ4_INCLUDE"),
    ("zstd", "ZSTD", "DEP_ZSTD_INCLUDE"),
    ("zlib", "ZLIB", "DEP_Z_INCLUDE"),
    ("bzip2", "BZIP2", "DEP_BZIP2_INCLUDE"),
)

# Reported target feature -> flag. SSE 4.2 enables hardware CRC32C.
X86_FEATURE_FLAGS = (
    ("sse2", "-msse2"),
    ("sse4.1", "-msse4.1"),
    ("sse4.2", "-msse4.2"),
    ("avx2", "-mavx2"),
    ("bmi1", "-mbmi"),
    ("lzcnt", "-mlzcnt"),
    ("pclmulqdq", "-mpclmul"),
)

MSVC_FLAGS = ("-EHsc", "-std:c++20")

CXX_STANDARD = "-std=c++20"

# Matches the warning set in RocksDB's CMakeLists.txt.
GNU_FLAGS = (
    CXX_STANDARD,
    "-Wsign-compare",
    "-Wshadow",
    "-Wno-unused-parameter",
    "-Wno-unused-variable",
    "-Woverloaded-virtual",
    "-Wnon-virtual-dtor",
    "-Wno-missing-field-initializers",
    "-Wno-strict-aliasing",
    "-Wno-invalid-offsetof",
)

IOS_DEPLOYMENT_TARGET = "12.0"


def platform_defines(target: TargetDescriptor):
    if target.is_windows:
        defines = list(WINDOWS_DEFINES)
        if target.raw == MINGW_TARGET:
            defines.extend(MINGW_DEFINES)
        return defines
    defines = list(PLATFORM_DEFINES.get(target.os_family, ()))
    if target.raw == ANDROID_ARMV7:
        defines.append(("_FILE_OFFSET_BITS", "32"))
    return defines


def assemble_defines(
    target: TargetDescriptor,
    features: FeatureSet,
    decisions: Mapping[str, DependencyDecision],
):
    defines = []
    for feature, name, _ in CODECS:
        if feature in features:
            defines.append((name, "1"))
    if "rtti" in features:
        defines.append(("USE_RTTI", "1"))
    defines.append(("NDEBUG", "1"))

    defines.extend(platform_defines(target))
    defines.append(("ROCKSDB_SUPPORT_THREAD_LOCAL", None))

    jemalloc = decisions.get("JEMALLOC")
    if jemalloc is not None and not jemalloc.is_skip:
        defines.append(("ROCKSDB_JEMALLOC", "1"))
        defines.append(("JEMALLOC_NO_DEMANGLE", "1"))

    if "io-uring" in features and "linux" in target.raw:
        defines.append(("ROCKSDB_IOURING_PRESENT", "1"))

    if target.raw != ANDROID_ARMV7 and target.pointer_width != 64:
        defines.append(("_FILE_OFFSET_BITS", "64"))
        defines.append(("_LARGEFILE64_SOURCE", "1"))
    return defines


def assemble_includes(
    features: FeatureSet,
    decisions: Mapping[str, DependencyDecision],
    overrides: OverrideMap,
):
    glibc_dev = overrides.value("GLIBC_DEV")
    gcc_path = overrides.value("GCC_PATH")
    gcc_version = overrides.value("GCC_VERSION")

    includes = [
        "rocksdb/include/",
        "rocksdb/",
        f"{glibc_dev}/include",
        f"{gcc_path}/include/c++/{gcc_version}/",
        "rocksdb/third-party/gtest-1.8.1/fused-src/",
    ]
    for feature, _, hint in CODECS:
        if feature not in features:
            continue
        if hint is None:
            includes.append(f"{feature}/")
            continue
        path = overrides.lookup(hint)
        if path:
            includes.append(path)
    includes.append(".")

    jemalloc = decisions.get("JEMALLOC")
    if jemalloc is not None and not jemalloc.is_skip:
        jemalloc_root = overrides.lookup("DEP_JEMALLOC_ROOT")
        if jemalloc_root:
            includes.append(f"{jemalloc_root.rstrip('/')}/include")
    return includes


def architecture_flags(target: TargetDescriptor, reported_features: str | None):
    """Flags for the reported x86_64 target features.

    No report (feature detection unavailable) means no flags.
    """
    if "x86_64" not in target.raw or reported_features is None:
        return []
    available = reported_features.split(",")
    flags = []
    for feature, flag in X86_FEATURE_FLAGS:
        if feature == "pclmulqdq" and target.os_family is OsFamily.ANDROID:
            continue
        if feature in available:
            flags.append(flag)
    return flags


def assemble_flags(
    target: TargetDescriptor,
    is_windows_toolchain: bool,
    *,
    features: FeatureSet = FeatureSet(),
    reported_features: str | None = None,
    sysroot: str | None = None,
):
    flags = []
    if sysroot and not is_windows_toolchain:
        flags.append(f"--sysroot={sysroot}")
    if "lto" in features:
        flags.append("-flto")
    flags.extend(architecture_flags(target, reported_features))
    if is_windows_toolchain:
        flags.extend(MSVC_FLAGS)
    else:
        flags.extend(GNU_FLAGS)
    if not target.is_windows:
        flags.extend(["-include", "cstdint"])
    return flags


def toolchain_environment(target: TargetDescriptor):
    if target.os_family is OsFamily.IOS:
        return [("IPHONEOS_DEPLOYMENT_TARGET", IOS_DEPLOYMENT_TARGET)]
    return []


def snappy_defines(target: TargetDescriptor):
    defines = [("NDEBUG", "1")]
    if target.endianness == "big":
        defines.append(("SNAPPY_IS_BIG_ENDIAN", "1"))
    return defines


def snappy_flags(is_windows_toolchain: bool):
    # Snappy requires C++11.
    if is_windows_toolchain:
        return ["-EHsc"]
    return ["-std=c++11"]
