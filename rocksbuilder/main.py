import click
from .commands import *


@click.group()
@click.option("--path", "-p", default=".", help="Path to the project directory.")
@click.pass_context
def cli(ctx, path):
    """RocksBuilder: resolve and drive RocksDB builds for any target."""
    ctx.obj = {"path": path}

cli.add_command(classify)
cli.add_command(resolve)
cli.add_command(build)
cli.add_command(bindings)
cli.add_command(sources)
cli.add_command(doctor)
cli.add_command(config)
cli.add_command(version)
cli.add_command(log)

if __name__ == '__main__':
    cli()
