"""
Context state — which community and channel the user is addressing.

A single ``ContextState`` is created by the session and handed to every
component by reference.  Only the menu selector mutates it; the mention
resolver, dispatcher and inbound printer read it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ContextState:
    """
    Currently selected community/channel.

    Invariant: ``channel_id`` is empty, or belongs to ``community_id``, or is a
    direct-message channel with ``community_id`` empty.  ``enabled`` is only
    set once a channel has been selected.
    """

    community_id: str = ""
    channel_id: str = ""
    enabled: bool = False
    community_name: str = ""
    channel_name: str = ""

    def set_community(self, community_id: str, name: str = "") -> None:
        """Select a community.  Any previous channel no longer applies."""
        self.community_id = community_id
        self.community_name = name
        self.channel_id = ""
        self.channel_name = ""
        self.enabled = False

    def set_channel(self, channel_id: str, name: str = "", *, direct: bool = False) -> None:
        """Select a channel and enable the state.

        Direct-message channels live outside any community, so selecting one
        clears the community.
        """
        if direct:
            self.community_id = ""
            self.community_name = ""
        self.channel_id = channel_id
        self.channel_name = name
        self.enabled = True

    def is_ready(self) -> bool:
        return bool(self.channel_id) and self.enabled

    @property
    def is_direct(self) -> bool:
        return bool(self.channel_id) and not self.community_id

    def describe(self) -> str:
        if not self.channel_id:
            return "no channel selected"
        if self.is_direct:
            return f"direct message: {self.channel_name or self.channel_id}"
        community = self.community_name or self.community_id
        return f"{community} / #{self.channel_name or self.channel_id}"
