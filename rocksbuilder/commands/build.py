import click
from .. import builder
from .. import config as config_module
from ..cli_logger import logger
from ..decorators import handle_exceptions
from .common import features_option, load_run_context, pick_features, pick_target, target_option

@click.command()
@click.pass_context
@target_option
@features_option
@click.option("--out-dir", "-o", default=None, help="Output location for bindings and archives (defaults to $OUT_DIR).")
@click.option("--no-bindings", is_flag=True, help="Skip running the binding generator.")
@handle_exceptions
def build(ctx, target, features, out_dir, no_bindings):
    """Provision sources, generate bindings and emit the build directives.

    The directives are written to stdout for the build host; diagnostics go
    to stderr and the log file.
    """
    conf, env, source_root = load_run_context(ctx)
    target = pick_target(target, env)
    feature_set = pick_features(features, conf)

    plan = builder.build_library(
        target,
        feature_set,
        env,
        source_root=source_root,
        out_dir=out_dir,
        defaults=config_module.configured_defaults(conf),
        with_bindings=not no_bindings,
    )
    for line in plan.to_directives():
        click.echo(line)
    logger.success(f"Build for {target} completed successfully.")
