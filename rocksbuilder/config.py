import toml
import os
from .cli_logger import logger

CONFIG_FILE = "rocksbuilder.toml"

def load_config(path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    if os.path.exists(config_path):
        logger.info(f"Loading configuration from {config_path}")
        try:
            with open(config_path, "r") as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error(f"Error decoding TOML file at {config_path}: {e}")
            logger.info("Please check the file's format for syntax errors.")
        except IOError as e:
            logger.error(f"Error reading configuration file at {config_path}: {e}")
            logger.info("Please check file permissions.")
    return {}

def save_config(config, path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Saving configuration to {config_path}")
    try:
        with open(config_path, "w") as f:
            toml.dump(config, f)
        return True
    except IOError as e:
        logger.error(f"Error saving configuration to {config_path}: {e}")
        logger.info("Please check file permissions and ensure the directory is writable.")
        return False

def configured_features(conf):
    """Feature names listed under ``[features] enabled``, or None when unset."""
    features = conf.get("features", {}).get("enabled")
    if features is None:
        return None
    return [str(f) for f in features]

def configured_defaults(conf):
    """String defaults from ``[defaults]`` that replace the built-in toolchain paths."""
    return {str(k): str(v) for k, v in conf.get("defaults", {}).items()}

def configured_source_root(conf, path="."):
    source_root = conf.get("paths", {}).get("source_root", ".")
    return os.path.normpath(os.path.join(path, source_root))
