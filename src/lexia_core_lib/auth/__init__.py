"""Session utilities for the LexiA orchestration layer.

A SessionContext is owned by the composing application and threaded
explicitly into stores and adapters.
"""

from lexia_core_lib.auth.session import SessionContext

__all__ = [
    "SessionContext",
]
