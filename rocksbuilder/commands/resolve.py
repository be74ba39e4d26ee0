import click
from ..decorators import handle_exceptions
from ..resolver import resolve as resolve_plan
from .common import (
    features_option,
    load_run_context,
    overrides_for,
    pick_features,
    pick_target,
    target_option,
)

@click.command()
@click.pass_context
@target_option
@features_option
@click.option("--out-dir", "-o", default=None, help="Output location recorded in the plan (defaults to $OUT_DIR).")
@click.option("--format", "output_format", type=click.Choice(["json", "directives"]), default="json",
              help="Print the plan as JSON or as build-host directives.")
@handle_exceptions
def resolve(ctx, target, features, out_dir, output_format):
    """Resolve the build plan without touching the source tree."""
    conf, env, source_root = load_run_context(ctx)
    target = pick_target(target, env)
    feature_set = pick_features(features, conf)

    plan = resolve_plan(target, feature_set, overrides_for(conf, env), source_root=source_root, out_dir=out_dir)
    if output_format == "json":
        click.echo(plan.to_json())
    else:
        for line in plan.to_directives():
            click.echo(line)
