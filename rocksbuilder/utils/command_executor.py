import subprocess
from ..cli_logger import logger

def run_shell_command(command, env=None, cwd=None):
    """
    Executes a command and waits for it to finish.

    Args:
        command (list): The command to execute as a list of strings.
        env (dict, optional): A dictionary of environment variables.
        cwd (str, optional): The working directory for the command.

    Returns:
        A tuple (stdout, stderr, return_code). return_code is negative when the
        process was killed by a signal and None when it could not be started,
        in which case stderr carries the reason.
    """
    logger.info(f"Running command: \"{' '.join(command)}\" in dir: {cwd or '.'}")
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            env=env,
            check=False,
            cwd=cwd
        )
        return result.stdout, result.stderr, result.returncode
    except FileNotFoundError as e:
        logger.error(f"Command not found: {e.filename}")
        return "", str(e), None
    except OSError as e:
        logger.error(f"Could not start command {command[0]}: {e}")
        return "", str(e), None
