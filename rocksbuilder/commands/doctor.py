import os
import shutil
import click
from ..cli_logger import logger
from ..overrides import OverrideMap
from ..provisioning import SENTINEL
from ..resolver import classify_target
from ..toolchain import detect_compiler
from .common import load_run_context, overrides_for, target_option

REQUIRED_TOOLS = (
    ("git", "fetches the bundled sources"),
    ("bindgen", "generates the RocksDB bindings"),
)

OPTIONAL_TOOLS = (
    ("pkg-config", "locates liburing for the io-uring feature"),
)

def check_environment(overrides: OverrideMap, source_root, target=None):
    """Report missing tools, sources and toolchain paths. Returns True when nothing required is missing."""
    all_ok = True

    for tool, purpose in REQUIRED_TOOLS:
        found = shutil.which(tool)
        if found:
            logger.step_info(f"{tool}: {found}", indent=2)
        else:
            logger.warning(f"'{tool}' not found on PATH; it {purpose}.")
            all_ok = False

    for tool, purpose in OPTIONAL_TOOLS:
        found = shutil.which(tool)
        if found:
            logger.step_info(f"{tool}: {found}", indent=2)
        else:
            logger.info(f"'{tool}' not found on PATH; it only {purpose}.")

    if target:
        compiler = detect_compiler(classify_target(target, overrides), overrides)
        if shutil.which(compiler.path):
            logger.step_info(f"compiler: {compiler.path}", indent=2)
        else:
            logger.warning(f"Compiler '{compiler.path}' for {target} not found. Set CXX to override it.")
            all_ok = False

    sentinel = os.path.join(source_root, SENTINEL)
    if not os.path.exists(sentinel):
        logger.warning(f"Bundled sources not provisioned ({sentinel} missing); 'rocksbuilder build' will fetch them.")

    for name in ("LIBCLANG_PATH", "LLVM_CONFIG_PATH"):
        resolved = overrides.resolve(name)
        if resolved.value and not os.path.exists(resolved.value):
            logger.warning(f"{name} points to '{resolved.value}', which does not exist.")
            all_ok = False
    return all_ok

@click.command()
@click.pass_context
@target_option
def doctor(ctx, target):
    """Check that the tools and paths a build needs are available."""
    logger.info("Running environment check...")
    conf, env, source_root = load_run_context(ctx)
    target = target or env.get("TARGET")
    if check_environment(overrides_for(conf, env), source_root, target):
        logger.success("Environment check completed successfully.")
    else:
        logger.error("Environment check found issues. Please review the warnings above.")
        ctx.exit(1)
