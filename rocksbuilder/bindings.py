"""Inputs for the external binding generator (bindgen) and its invocation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .cli_logger import logger
from .errors import BindingGenerationFailure, PreconditionMissing
from .overrides import OverrideMap
from .utils import run_shell_command

HEADER = "rocksdb/c.h"
OUTPUT_FILE = "bindings.rs"

# Defined by both libc and the compiler headers; generating it twice
# conflicts. https://github.com/rust-lang-nursery/rust-bindgen/issues/550
BLOCKLIST = ("max_align_t",)


@dataclass(frozen=True)
class BindingDescriptor:
    header_path: str
    type_blocklist: tuple[str, ...]
    integer_type_mapping: tuple[tuple[str, str], ...]
    ctypes_prefix: str
    derive_debug: bool
    include_flags: tuple[str, ...]
    environment: tuple[tuple[str, str], ...]

    def command(self, out_path):
        cmd = ["bindgen", self.header_path, "-o", out_path]
        if not self.derive_debug:
            cmd.append("--no-derive-debug")
        for name in self.type_blocklist:
            cmd.extend(["--blocklist-type", name])
        cmd.extend(["--ctypes-prefix", self.ctypes_prefix])
        if dict(self.integer_type_mapping).get("size_t") != "usize":
            cmd.append("--no-size_t-is-usize")
        cmd.append("--")
        cmd.extend(self.include_flags)
        return cmd


def include_dir(overrides: OverrideMap):
    return overrides.value("ROCKSDB_INCLUDE_DIR")


def clang_arguments(overrides: OverrideMap):
    glibc_dev = overrides.value("GLIBC_DEV")
    gcc_path = overrides.value("GCC_PATH")
    gcc_version = overrides.value("GCC_VERSION")
    libclang_path = overrides.value("LIBCLANG_PATH").rstrip("/")
    clang_version = overrides.value("CLANG_VERSION")
    clang_headers = f"{libclang_path}/clang/{clang_version}/include"
    return [
        "-I", f"{gcc_path}/include/c++/{gcc_version}/",
        "-I", f"{clang_headers}/",
        "-I", f"{clang_headers}/llvm_libc_wrappers/",
        "-B", f"{glibc_dev}/lib",
        "-idirafter", f"{glibc_dev}/include",
    ]


def generator_environment(overrides: OverrideMap):
    glibc_dev = overrides.value("GLIBC_DEV")
    gcc_path = overrides.value("GCC_PATH")
    gcc_version = overrides.value("GCC_VERSION")
    extra_args = f"-B{glibc_dev}/lib -idirafter {glibc_dev}/include -idirafter {gcc_path}/include/c++/{gcc_version}/"
    return [
        ("LIBCLANG_PATH", overrides.value("LIBCLANG_PATH")),
        ("LLVM_CONFIG_PATH", overrides.value("LLVM_CONFIG_PATH")),
        ("LLVM_CONFIG", overrides.value("LLVM_CONFIG")),
        ("BINDGEN_EXTRA_CLANG_ARGS", extra_args),
    ]


def build(overrides: OverrideMap, header_location: str | None = None, source_root: str = "."):
    """Assemble the binding descriptor.

    ``header_location`` defaults to ``<ROCKSDB_INCLUDE_DIR>/rocksdb/c.h``;
    relative locations are taken from ``source_root``. A missing header is
    an unmet precondition and raises :class:`PreconditionMissing`.
    """
    if header_location is None:
        header_location = f"{include_dir(overrides)}/{HEADER}"
    header_path = header_location
    if not os.path.isabs(header_path):
        header_path = os.path.normpath(os.path.join(source_root, header_path))
    if not os.path.exists(header_path):
        raise PreconditionMissing(
            f"RocksDB C header not found at {header_path}",
            hint="Fetch the bundled sources or point ROCKSDB_INCLUDE_DIR at an installed RocksDB include directory.",
            context={"header": header_path},
        )

    return BindingDescriptor(
        header_path=header_path,
        type_blocklist=BLOCKLIST,
        integer_type_mapping=(("size_t", "usize"),),
        ctypes_prefix="libc",
        derive_debug=False,
        include_flags=tuple(clang_arguments(overrides)),
        environment=tuple(generator_environment(overrides)),
    )


def generate(descriptor: BindingDescriptor, out_dir: str, env: Mapping[str, str]):
    """Run bindgen with ``env`` plus the descriptor environment, writing ``bindings.rs`` into ``out_dir``."""
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, OUTPUT_FILE)
    run_env = dict(env)
    run_env.update(descriptor.environment)
    for key, value in descriptor.environment:
        logger.step_info(f"{key}={value}", indent=2)

    stdout, stderr, returncode = run_shell_command(descriptor.command(out_path), env=run_env)
    if returncode != 0:
        raise BindingGenerationFailure(
            "unable to generate rocksdb bindings",
            hint="Check that bindgen is installed and LIBCLANG_PATH points at libclang.",
            context={"exit": str(returncode), "stderr": (stderr or "").strip()},
        )
    logger.success(f"Bindings written to {out_path}")
    return out_path
