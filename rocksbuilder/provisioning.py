import os

from .cli_logger import logger
from .errors import ConfigurationConflict, PreconditionMissing, ProvisioningFailure
from .utils import run_shell_command

SENTINEL = os.path.join("rocksdb", "AUTHORS")
SUBMODULE_COMMAND = ["git", "submodule", "update", "--init"]


def update_submodules(cwd):
    """Fetch the bundled source trees. Runs once, no retry, no timeout."""
    stdout, stderr, returncode = run_shell_command(SUBMODULE_COMMAND, cwd=cwd)
    context = {"command": " ".join(SUBMODULE_COMMAND), "cwd": cwd, "stderr": stderr.strip()}
    if returncode is None:
        raise ProvisioningFailure(f"Command failed with error: {stderr.strip()}", context=context)
    if returncode < 0:
        raise ProvisioningFailure(f"Command got killed (signal {-returncode})", context=context)
    if returncode != 0:
        raise ProvisioningFailure(f"Command failed with error code {returncode}", context=context)
    logger.success("Submodules updated.")


def ensure_sources(source_root):
    """Run the submodule fetch when the bundled RocksDB tree is missing."""
    if os.path.exists(os.path.join(source_root, SENTINEL)):
        return False
    logger.info(f"  - {SENTINEL} not found under {source_root}, fetching submodules...")
    update_submodules(os.path.normpath(os.path.join(source_root, "..")))
    return True


def fail_on_empty_directory(path):
    if not os.path.isdir(path) or not os.listdir(path):
        raise PreconditionMissing(
            f"The `{path}` directory is empty, did you forget to pull the submodules?",
            hint="Try `git submodule update --init --recursive`",
            context={"directory": path},
        )


def find_library(name, feature):
    """Look ``name`` up with pkg-config and return its library directories."""
    _, stderr, returncode = run_shell_command(["pkg-config", "--exists", name])
    if returncode == 0:
        stdout, stderr, returncode = run_shell_command(["pkg-config", "--libs-only-L", name])
    if returncode != 0:
        raise ConfigurationConflict(
            f"The {feature} feature was requested but the library is not available ({name})",
            hint=f"Install {name} or disable the `{feature}` feature.",
            context={"library": name, "stderr": stderr.strip()},
        )
    search_paths = [token[2:] for token in stdout.split() if token.startswith("-L") and len(token) > 2]
    logger.info(f"  - pkg-config found {name}")
    for path in search_paths:
        logger.step_info(f"link search path: {path}", indent=4)
    return search_paths
