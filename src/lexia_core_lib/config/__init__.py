"""Configuration"""

from lexia_core_lib.config.settings import ProviderEnvSettings, Settings

__all__ = [
    "ProviderEnvSettings",
    "Settings",
]
