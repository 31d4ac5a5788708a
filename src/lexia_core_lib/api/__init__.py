"""HTTP API for case conversations."""

from lexia_core_lib.api.router import create_app, router

__all__ = [
    "create_app",
    "router",
]
