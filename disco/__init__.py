"""
disco — a terminal chat client for Discord.

The package is the interactive core of the client: it keeps track of the
community and channel the user is talking to, turns terminal input into
outbound messages, and resolves ``@name`` mentions before sending.

Layers (bottom to top):
    1. Types and context state
    2. Transport capability interface (discord.py adapter)
    3. Menu selection, command pass, mention resolution
    4. Input classification and dispatch
    5. Session (read loop + inbound printer) and the click CLI
"""

__version__ = "2.3.0"
