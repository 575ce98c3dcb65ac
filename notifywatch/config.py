import copy
import os

import toml

DEFAULT_CONFIG = {
    "logging": {"level": "WARNING", "log_dir": ""},
    "output": {"format": "text"},
}


def load_config(config_path=None):
    """
    Load configuration from an optional TOML file.

    Only an explicitly given file is read; without one the defaults are
    returned. Sections present in the file override the defaults key by key.

    Args:
        config_path (str): Path to the TOML file, or None.

    Returns:
        dict: The configuration settings.
    """
    config_data = copy.deepcopy(DEFAULT_CONFIG)
    if not config_path:
        return config_data

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        file_data = toml.load(f)

    for section, values in file_data.items():
        if isinstance(values, dict) and isinstance(config_data.get(section), dict):
            config_data[section].update(values)
        else:
            config_data[section] = values

    return config_data
