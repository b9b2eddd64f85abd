"""
HTTP API over the signal engine.
"""
from signal_engine.api.server import ApiServer, create_app

__all__ = ["ApiServer", "create_app"]
