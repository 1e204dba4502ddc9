"""
Shared fixtures for the disco test suite.

A small guild layout (two guilds, three channels, two members, one DM
channel) that most modules reuse; the doubles themselves live in fakes.py.
"""

from __future__ import annotations

import pytest

from disco.output import OutputWriter
from disco.state import ContextState
from disco.types import Channel, Community, DirectMessageChannel, Member
from fakes import FakeTransport, make_writer


@pytest.fixture()
def alice() -> Member:
    return Member(id="101", username="alice")


@pytest.fixture()
def transport(alice: Member) -> FakeTransport:
    """A transport with two guilds, three channels and a couple of members."""
    return FakeTransport(
        communities=[Community(id="g1", name="plan9"), Community(id="g2", name="gophers")],
        channels={
            "g1": [
                Channel(id="c1", name="general"),
                Channel(id="c2", name="random"),
            ],
            "g2": [Channel(id="c3", name="lounge")],
        },
        members={
            "g1": [
                alice,
                Member(id="102", username="bobby", nickname="bob"),
            ],
        },
        dm_channels=[
            DirectMessageChannel(
                id="d1",
                recipients=[Member(id="201", username="carol")],
            ),
        ],
    )


@pytest.fixture()
def writer() -> OutputWriter:
    return make_writer()


@pytest.fixture()
def active_state() -> ContextState:
    """State after picking plan9 / #general."""
    state = ContextState()
    state.set_community("g1", "plan9")
    state.set_channel("c1", "general")
    return state
