import json
import click
from ..overrides import OverrideMap
from ..resolver import classify_target
from .common import environment_snapshot

@click.command()
@click.argument("target")
def classify(target):
    """Show how TARGET is classified (architecture, OS family, width, endianness)."""
    descriptor = classify_target(target, OverrideMap(environment_snapshot()))
    click.echo(json.dumps(descriptor.to_dict(), indent=2))
