import click
import importlib.metadata
from .. import __version__
from ..cli_logger import logger

@click.command()
def version():
    """Print the version of the RocksBuilder tool."""
    try:
        ver = importlib.metadata.version("rocksbuilder")
    except importlib.metadata.PackageNotFoundError:
        logger.warning("RocksBuilder is not installed as a distribution; reporting the source tree version.")
        ver = __version__
    click.echo(f"RocksBuilder version {ver}")
