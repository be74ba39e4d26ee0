import os
import click
from .. import config as config_module
from ..features import FeatureSet
from ..overrides import OverrideMap


def environment_snapshot():
    """The one place the process environment is read."""
    return dict(os.environ)


def target_option(func):
    return click.option("--target", "-t", default=None, help="Target triple (defaults to $TARGET).")(func)


def features_option(func):
    return click.option(
        "--features", "-f", default=None,
        help="Comma-separated features (defaults to rocksbuilder.toml, then the default set).",
    )(func)


def pick_target(target, env):
    target = target or env.get("TARGET")
    if not target:
        raise click.UsageError("No target given. Pass --target or set the TARGET environment variable.")
    return target


def pick_features(features, conf):
    if features is not None:
        try:
            return FeatureSet.parse(features)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--features")
    try:
        return FeatureSet.parse(config_module.configured_features(conf))
    except ValueError as e:
        raise click.UsageError(f"{e} (from [features] enabled in {config_module.CONFIG_FILE})")


def load_run_context(ctx):
    """Config, source root and environment snapshot for a command invocation."""
    path = ctx.obj["path"]
    conf = config_module.load_config(path=path)
    env = environment_snapshot()
    source_root = config_module.configured_source_root(conf, path)
    return conf, env, source_root


def overrides_for(conf, env):
    return OverrideMap(env, config_module.configured_defaults(conf))
