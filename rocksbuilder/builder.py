import os
from dataclasses import replace

from . import bindings
from .cli_logger import logger
from .features import FeatureSet
from .overrides import OverrideMap
from .provisioning import ensure_sources, fail_on_empty_directory, find_library
from .resolver import DEFAULT_OUT_DIR, resolve


def check_preconditions(plan, features, source_root="."):
    """Filesystem and toolchain checks for the compile steps in ``plan``.

    Returns ``plan``, extended with the library directories pkg-config
    reports for system libraries the enabled features need.
    """
    search_paths = []
    if plan.step("rocksdb") is not None:
        fail_on_empty_directory(os.path.join(source_root, "rocksdb"))
        if "io-uring" in features and "linux" in plan.target.raw:
            search_paths.extend(find_library("liburing", "io-uring"))
    if plan.step("snappy") is not None:
        fail_on_empty_directory(os.path.join(source_root, "snappy"))
    if not search_paths:
        return plan
    return replace(plan, link_search_paths=plan.link_search_paths + tuple(search_paths))


def generate_bindings(overrides, env, source_root=".", out_dir=DEFAULT_OUT_DIR):
    logger.info("Generating RocksDB bindings...")
    descriptor = bindings.build(overrides, source_root=source_root)
    return bindings.generate(descriptor, out_dir, env)


def build_library(target, features, env, source_root=".", out_dir=None, defaults=None, with_bindings=True):
    """Run the whole pipeline for ``target`` and return the build plan.

    ``env`` is the environment snapshot for this run. Source provisioning
    runs first when the bundled tree is missing; any failure is fatal and
    propagates as a :class:`~rocksbuilder.errors.RocksBuilderError`.
    """
    if not isinstance(features, FeatureSet):
        features = FeatureSet.parse(features)
    overrides = OverrideMap(env, defaults)
    out_dir = out_dir or env.get("OUT_DIR") or DEFAULT_OUT_DIR

    logger.info(f"Building RocksDB for {target}...")
    ensure_sources(source_root)

    if with_bindings:
        generate_bindings(overrides, env, source_root=source_root, out_dir=out_dir)

    plan = resolve(target, features, overrides, source_root=source_root, out_dir=out_dir)
    plan = check_preconditions(plan, features, source_root)

    for step in plan.steps:
        logger.step_info(f"{step.output}: {len(step.source_files)} sources, {len(step.defines)} defines", indent=2)
    logger.success(f"Build plan for {plan.target.raw} resolved.")
    return plan
