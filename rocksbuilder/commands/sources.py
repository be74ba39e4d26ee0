import click
from ..decorators import handle_exceptions
from ..features import decide
from ..resolver import classify_target
from ..sources import compilation_units, compose, load_master_list
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
@handle_exceptions
def sources(ctx, target, features):
    """List the RocksDB translation units compiled for a target."""
    conf, env, _ = load_run_context(ctx)
    target = pick_target(target, env)
    feature_set = pick_features(features, conf)
    overrides = overrides_for(conf, env)

    descriptor = classify_target(target, overrides)
    jemalloc = decide("JEMALLOC", feature_set, overrides, descriptor)
    for unit in compilation_units(compose(load_master_list(), descriptor, jemalloc)):
        click.echo(unit)
