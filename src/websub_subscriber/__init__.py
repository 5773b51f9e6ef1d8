"""
WebSub Subscriber

A WebSub (PubSubHubbub) subscriber callback: subscribes to a hub for a
channel's video feed, answers the hub's verification handshake and logs
incoming notifications.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.settings import ConfigError, Settings, load_config
from .server import WebSubSubscriber

__all__ = [
    "WebSubSubscriber",
    "Settings",
    "ConfigError",
    "load_config",
    "__version__",
    "__license__",
]
