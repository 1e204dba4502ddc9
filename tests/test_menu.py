"""Tests for disco.menu.MenuSelector."""

from __future__ import annotations

import pytest

from disco.menu import InitializationError, MenuSelector, MenuStage, parse_index
from disco.state import ContextState
from fakes import FakeTransport, ScriptedReader, make_writer, output_of


def make_menu(transport: FakeTransport, answers: list[str], state: ContextState | None = None):
    state = state if state is not None else ContextState()
    reader = ScriptedReader(answers)
    writer = make_writer()
    return MenuSelector(transport, state, reader, writer), state, reader, writer


class TestParseIndex:
    def test_valid(self):
        assert parse_index("1\n", 3) == 0
        assert parse_index(" 3 ", 3) == 2

    def test_out_of_range(self):
        assert parse_index("0", 3) is None
        assert parse_index("4", 3) is None
        assert parse_index("-1", 3) is None

    def test_not_a_number(self):
        assert parse_index("general", 3) is None
        assert parse_index("", 3) is None


class TestRun:
    @pytest.mark.asyncio
    async def test_selects_community_then_channel(self, transport):
        menu, state, _, writer = make_menu(transport, ["1\n", "2\n"])
        await menu.run()
        assert state.community_id == "g1"
        assert state.channel_id == "c2"
        assert state.channel_name == "random"
        assert state.is_ready()
        assert menu.stage is MenuStage.ACTIVE
        out = output_of(writer)
        assert "plan9" in out
        assert "#random" in out

    @pytest.mark.asyncio
    async def test_out_of_range_reprompts_without_mutating(self, transport):
        menu, state, reader, writer = make_menu(transport, ["7\n", "abc\n", "2\n", "1\n"])
        await menu.select_community()
        assert state.community_id == "g2"
        assert reader.reads == 3
        assert output_of(writer).count("Enter a number between 1 and 2.") == 2

    @pytest.mark.asyncio
    async def test_invalid_answer_leaves_state_untouched(self, transport, active_state):
        menu, _, _, _ = make_menu(transport, ["9\n"], state=active_state)
        with pytest.raises(InitializationError):
            await menu.select_community()
        assert active_state.community_id == "g1"
        assert active_state.channel_id == "c1"
        assert active_state.is_ready()

    @pytest.mark.asyncio
    async def test_empty_community_list(self):
        menu, state, _, _ = make_menu(FakeTransport(), ["1\n"])
        with pytest.raises(InitializationError, match="No servers"):
            await menu.run()
        assert state.community_id == ""

    @pytest.mark.asyncio
    async def test_empty_channel_list(self, transport):
        transport.channels["g2"] = []
        menu, state, _, _ = make_menu(transport, ["2\n", "1\n"])
        with pytest.raises(InitializationError, match="No channels"):
            await menu.run()
        assert state.enabled is False

    @pytest.mark.asyncio
    async def test_eof_during_selection(self, transport):
        menu, _, _, _ = make_menu(transport, [])
        with pytest.raises(InitializationError, match="Input closed"):
            await menu.run()

    @pytest.mark.asyncio
    async def test_channel_without_community(self, transport):
        menu, _, _, _ = make_menu(transport, ["1\n"])
        with pytest.raises(InitializationError, match="No server selected"):
            await menu.select_channel()


class TestReentry:
    @pytest.mark.asyncio
    async def test_select_channel_keeps_community(self, transport, active_state):
        menu, _, _, _ = make_menu(transport, ["2\n"], state=active_state)
        await menu.select_channel()
        assert active_state.community_id == "g1"
        assert active_state.channel_id == "c2"

    @pytest.mark.asyncio
    async def test_select_direct_message(self, transport, active_state):
        menu, _, _, writer = make_menu(transport, ["1\n"], state=active_state)
        await menu.select_direct_message()
        assert active_state.channel_id == "d1"
        assert active_state.community_id == ""
        assert active_state.is_ready()
        assert "carol" in output_of(writer)

    @pytest.mark.asyncio
    async def test_no_direct_messages(self, active_state):
        menu, _, _, _ = make_menu(FakeTransport(), ["1\n"], state=active_state)
        with pytest.raises(InitializationError, match="No direct message"):
            await menu.select_direct_message()
        assert active_state.channel_id == "c1"


class TestLabels:
    @pytest.mark.asyncio
    async def test_bracketed_names_are_shown_literally(self, transport):
        transport.communities[0].name = "[/r/python] hangout"
        transport.communities[1].name = "[eu] chat"
        menu, state, _, writer = make_menu(transport, ["1\n", "1\n"])
        await menu.run()
        assert state.community_name == "[/r/python] hangout"
        out = output_of(writer)
        assert "[/r/python] hangout" in out
        assert "[eu] chat" in out


class TestRunCommitsTogether:
    @pytest.mark.asyncio
    async def test_community_without_channels_keeps_previous_selection(
        self, transport, active_state
    ):
        transport.channels["g2"] = []
        menu, _, _, _ = make_menu(transport, ["2\n"], state=active_state)
        menu.stage = MenuStage.ACTIVE
        with pytest.raises(InitializationError, match="No channels available in gophers"):
            await menu.run()
        assert active_state.community_id == "g1"
        assert active_state.channel_id == "c1"
        assert active_state.is_ready()
        assert menu.stage is MenuStage.ACTIVE
