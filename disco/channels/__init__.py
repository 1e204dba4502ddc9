"""
disco transports — platform adapters behind the ChatTransport interface.

discord.py is imported lazily inside the Discord adapter, so importing this
package does not require it.
"""

from disco.channels.base import ChatTransport, TransportError
from disco.channels.discord_channel import DiscordTransport

__all__ = [
    "ChatTransport",
    "DiscordTransport",
    "TransportError",
]
