import functools
import json
import click
import sys # Import sys for sys.exc_info()
from .cli_logger import logger
from .errors import RocksBuilderError

def handle_exceptions(func):
    """A decorator that turns fatal errors into a diagnostic and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.Abort:
            logger.warning("\nCommand aborted by user.")
            sys.exit(1)
        except click.ClickException:
            raise
        except RocksBuilderError as e:
            payload = e.to_dict()
            lines = str(payload["message"]).splitlines()
            logger.error(f"[{payload['code']}] {lines[0]}")
            for line in lines[1:]:
                logger.step_info(line, indent=2)
            logger.debug(json.dumps(payload, sort_keys=True))
            sys.exit(1)
        except Exception as e:
            logger.error(f"\nAn unexpected error occurred: {e}")
            logger.exception(*sys.exc_info())
            sys.exit(1)
    return wrapper
