"""
Hubitat Maker API bridge.

Keeps a local, normalized view of Hubitat devices in sync with the hub
through polling, webhooks and outbound commands.
"""

__version__ = "0.1.0"
