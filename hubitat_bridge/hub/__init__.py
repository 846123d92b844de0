"""
Hub communication: the client protocol and the Maker API implementation.
"""

from .base import CommandParam, HubClient
from .maker_api import MakerAPIClient

__all__ = [
    "CommandParam",
    "HubClient",
    "MakerAPIClient",
]
