"""
DesignOS: YAML Configuration Loader

Loads:
- access.yaml    (roles, tabs, capabilities)
- settings.yaml  (session + routing settings)

Usage:
    from config.system_loader import get_access_config
"""

import os
import yaml

# -------------------------------------------------
# Base Config Path
# -------------------------------------------------

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def config_dir() -> str:
    return os.getenv("DESIGNOS_CONFIG_DIR") or BASE_DIR


def _load_yaml(filename: str) -> dict:
    path = os.path.join(config_dir(), filename)

    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at top level")

    return data


# -------------------------------------------------
# Public Config Getters
# -------------------------------------------------

def get_access_config() -> dict:
    return _load_yaml("access.yaml")


def get_system_config() -> dict:
    return _load_yaml("settings.yaml")
