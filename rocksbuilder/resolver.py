"""Resolution pipeline.

classify -> overrides -> decisions -> {sources, defines/flags} -> links.

:func:`resolve` is a pure function of its arguments: everything it knows
about the environment comes from the :class:`OverrideMap` it is given, and
it neither inspects the source tree nor runs processes. Identical inputs
give identical plans.
"""

from __future__ import annotations

from .cli_logger import logger
from .defines import (
    assemble_defines,
    assemble_flags,
    assemble_includes,
    snappy_defines,
    snappy_flags,
    toolchain_environment,
)
from .features import DependencyDecision, FeatureSet, decide_all, decide_top_level
from .linking import assemble as assemble_links
from .overrides import OverrideMap
from .plan import BuildPlan, CompileStep
from .sources import compilation_units, compose, load_master_list
from .target import TargetDescriptor, classify
from .toolchain import Compiler, check_lto, detect_compiler

FEATURE_VAR = "CARGO_CFG_TARGET_FEATURE"
POINTER_WIDTH_VAR = "CARGO_CFG_TARGET_POINTER_WIDTH"
ENDIAN_VAR = "CARGO_CFG_TARGET_ENDIAN"

DEFAULT_OUT_DIR = "out"

SNAPPY_SOURCES = (
    "snappy/snappy.cc",
    "snappy/snappy-sinksource.cc",
    "snappy/snappy-c.cc",
)


def classify_target(raw: str, overrides: OverrideMap) -> TargetDescriptor:
    return classify(raw, overrides.get(POINTER_WIDTH_VAR), overrides.get(ENDIAN_VAR))


def env_triggers(decision: DependencyDecision):
    triggers = [f"rerun-if-env-changed={decision.name}_COMPILE"]
    if not decision.force_compiled:
        triggers.append(f"rerun-if-env-changed={decision.name}_LIB_DIR")
        triggers.append(f"rerun-if-env-changed={decision.name}_STATIC")
    return triggers


def rocksdb_step(target, features, decisions, overrides, compiler: Compiler, master_list):
    if "lto" in features:
        check_lto(compiler)

    msvc = compiler.is_like_msvc
    composed = compose(master_list, target, decisions.get("JEMALLOC"))
    return CompileStep(
        name="rocksdb",
        output="librocksdb.a",
        include_dirs=tuple(assemble_includes(features, decisions, overrides)),
        defines=tuple(assemble_defines(target, features, decisions)),
        compiler_flags=tuple(assemble_flags(
            target,
            msvc,
            features=features,
            reported_features=overrides.get(FEATURE_VAR),
            sysroot=overrides.value("GLIBC_DEV"),
        )),
        source_files=tuple(compilation_units(composed)),
        static_crt=msvc and "mt_static" in features,
        environment=tuple(toolchain_environment(target)),
    )


def snappy_step(target, features, overrides, compiler: Compiler):
    gcc_path = overrides.value("GCC_PATH")
    gcc_version = overrides.value("GCC_VERSION")
    msvc = compiler.is_like_msvc
    return CompileStep(
        name="snappy",
        output="libsnappy.a",
        include_dirs=("snappy/", f"{gcc_path}/include/c++/{gcc_version}/", "."),
        defines=tuple(snappy_defines(target)),
        compiler_flags=tuple(snappy_flags(msvc)),
        source_files=SNAPPY_SOURCES,
        static_crt=msvc and "mt_static" in features,
    )


def resolve(
    target_raw: str,
    features: FeatureSet,
    overrides: OverrideMap,
    *,
    source_root: str = ".",
    out_dir: str | None = None,
    master_list=None,
) -> BuildPlan:
    """Resolve the complete build plan for ``target_raw``."""
    target = classify_target(target_raw, overrides)
    logger.info(f"Resolving build plan for {target.raw} ({target.os_family.value}, {target.pointer_width}-bit)")
    compiler = detect_compiler(target, overrides)
    out_dir = out_dir or overrides.get("OUT_DIR") or DEFAULT_OUT_DIR
    manifest_dir = overrides.get("CARGO_MANIFEST_DIR") or source_root

    top = decide_top_level(overrides, target)
    triggers = env_triggers(top)

    if top.system_only:
        return BuildPlan(
            target=target,
            compiler_path=compiler.path,
            decisions=(top,),
            link_directives=tuple(assemble_links(top, {}, target, overrides, features, out_dir)),
            rerun_triggers=tuple(triggers),
            warnings=tuple(overrides.diagnostics),
        )

    decisions = decide_all(features, overrides, target)

    steps = []
    if top.is_bundled:
        triggers.append("rerun-if-changed=rocksdb/")
        if master_list is None:
            master_list = load_master_list()
        steps.append(rocksdb_step(target, features, decisions, overrides, compiler, master_list))

    for decision in decisions.values():
        if decision.is_skip:
            continue
        triggers.extend(env_triggers(decision))
        if decision.name == "SNAPPY" and decision.is_bundled:
            triggers.append("rerun-if-changed=snappy/")
            steps.append(snappy_step(target, features, overrides, compiler))

    links = assemble_links(top, decisions, target, overrides, features, out_dir)

    return BuildPlan(
        target=target,
        compiler_path=compiler.path,
        decisions=(top,) + tuple(decisions.values()),
        steps=tuple(steps),
        link_directives=tuple(links),
        rerun_triggers=tuple(triggers),
        exports=(("cargo_manifest_dir", manifest_dir), ("out_dir", out_dir)),
        warnings=tuple(overrides.diagnostics),
    )

