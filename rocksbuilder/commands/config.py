import click
import os
import json
from .. import config as config_module
from ..cli_logger import logger
from ..features import FeatureSet
from ..overrides import DEFAULTS, Provenance
from .common import environment_snapshot, overrides_for

NOT_FOUND = "Error: No rocksbuilder.toml found. Create one or run 'rocksbuilder config set' to start one."

FEATURES_KEY = "features.enabled"
DEFAULTS_PREFIX = "defaults."


def _config_path(ctx):
    return os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)


def _existing_config(ctx):
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(NOT_FOUND)
    return conf


@click.group()
@click.pass_context
def config(ctx):
    """View or edit the rocksbuilder.toml configuration file."""
    pass

@config.command()
@click.pass_context
def view(ctx):
    """View the contents of the rocksbuilder.toml file."""
    if not _existing_config(ctx):
        return
    try:
        with open(_config_path(ctx), 'r') as f:
            click.echo(f.read())
    except IOError as e:
        logger.error(f"Error reading rocksbuilder.toml at {_config_path(ctx)}: {e}")

@config.command()
@click.pass_context
def edit(ctx):
    """Edit the rocksbuilder.toml file in your default editor."""
    if _existing_config(ctx):
        click.edit(filename=_config_path(ctx))

@config.command(name="list")
@click.pass_context
def list_keys(ctx):
    """List all configuration keys and values."""
    conf = _existing_config(ctx)
    if conf:
        click.echo(json.dumps(conf, indent=4))


def _effective_default(conf, name):
    """Value and source of a toolchain default after environment overrides."""
    configured = config_module.configured_defaults(conf)
    env = environment_snapshot()
    if name not in configured and name not in DEFAULTS and name not in env:
        return None, None
    resolved = overrides_for(conf, env).resolve(name)
    if resolved.provenance is Provenance.ENVIRONMENT:
        return resolved.value, "environment"
    if name in configured:
        return resolved.value, config_module.CONFIG_FILE
    return resolved.value, "built-in default"


def _effective_features(conf):
    names = config_module.configured_features(conf)
    source = "built-in default" if names is None else config_module.CONFIG_FILE
    return ",".join(sorted(FeatureSet.parse(names))), source


@config.command()
@click.argument('key')
@click.pass_context
def get(ctx, key):
    """Get a value as a run would see it.

    ``defaults.NAME`` reports the effective value of a toolchain default,
    with the environment taking precedence over rocksbuilder.toml and the
    built-in defaults. ``features.enabled`` reports the effective feature
    set. The source of the value is logged alongside it.
    """
    conf = config_module.load_config(path=ctx.obj["path"])

    if key.startswith(DEFAULTS_PREFIX):
        name = key[len(DEFAULTS_PREFIX):]
        value, source = _effective_default(conf, name)
        if source is None:
            logger.error(f"Error: Key '{key}' not found in rocksbuilder.toml, the environment or the built-in defaults")
            return
        click.echo(value)
        logger.info(f"{name} comes from {source}")
        return

    if key == FEATURES_KEY:
        try:
            value, source = _effective_features(conf)
        except ValueError as e:
            raise click.UsageError(f"{e} (from [features] enabled in rocksbuilder.toml)")
        click.echo(value)
        logger.info(f"Features come from {source}")
        return

    value = conf
    try:
        for k in key.split('.'):
            value = value[k]
        click.echo(value)
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in rocksbuilder.toml")


def _parse_value(key, value):
    # features.enabled is the only list-valued key
    if key != FEATURES_KEY:
        return value
    try:
        return sorted(FeatureSet.parse(value))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'VALUE'")

@config.command(name="set")
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_key(ctx, key, value):
    """Set a value in the rocksbuilder.toml file, creating the file if needed."""
    parsed = _parse_value(key, value)
    conf = config_module.load_config(path=ctx.obj["path"])

    keys = key.split('.')
    d = conf
    for k in keys[:-1]:
        d = d.setdefault(k, {})
    d[keys[-1]] = parsed

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Set '{key}' to '{value}'")

@config.command()
@click.argument('key')
@click.pass_context
def unset(ctx, key):
    """Remove a key from the rocksbuilder.toml file."""
    conf = _existing_config(ctx)
    if not conf:
        return

    keys = key.split('.')
    d = conf
    try:
        for k in keys[:-1]:
            d = d[k]
        del d[keys[-1]]
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in rocksbuilder.toml")
        return
    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Unset '{key}'")
