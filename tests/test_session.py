"""
End-to-end tests for disco.session.DiscoSession against the in-memory
transport: startup, the read loop, and shutdown.
"""

from __future__ import annotations

import pytest

from disco.config import DiscoConfig, DiscordConfig, DisplayConfig, NotifyConfig
from disco.session import DiscoSession
from disco.types import InboundMessage, Member
from fakes import ScriptedReader, make_writer, output_of


def make_config(**kwargs) -> DiscoConfig:
    return DiscoConfig(
        discord=DiscordConfig(token="test-token"),
        display=DisplayConfig(load_backlog=False, messages=5),
        notifier=NotifyConfig(command="true"),
        **kwargs,
    )


def make_session(transport, lines, config=None):
    writer = make_writer()
    session = DiscoSession(
        config or make_config(),
        transport=transport,
        reader=ScriptedReader(lines),
        writer=writer,
    )
    return session, writer


class TestStartup:
    @pytest.mark.asyncio
    async def test_full_run(self, transport):
        session, writer = make_session(transport, ["1\n", "1\n", "hello\n", ":q\n"])
        assert await session.run() == 0
        assert transport.started and transport.stopped
        assert transport.presence == ["Plan 9"]
        assert transport.sent == [("c1", "hello")]
        out = output_of(writer)
        assert "disco version: 2.3.0" in out
        assert "plan9 / #general" in out

    @pytest.mark.asyncio
    async def test_connection_failure_is_fatal(self, transport):
        transport.start_error = RuntimeError("401 Unauthorized")
        session, writer = make_session(transport, ["1\n", "1\n", "hello\n"])
        assert await session.run() == 1
        assert transport.sent == []
        assert transport.stopped is False
        assert "Initialization failed: Session failed: 401 Unauthorized" in output_of(writer)

    @pytest.mark.asyncio
    async def test_no_servers_is_fatal(self, transport):
        transport.communities = []
        session, writer = make_session(transport, ["hello\n"])
        assert await session.run() == 1
        assert transport.sent == []
        assert transport.stopped is True
        assert "No servers available" in output_of(writer)

    @pytest.mark.asyncio
    async def test_presence_failure_is_not_fatal(self, transport):
        async def broken_presence(status):
            raise RuntimeError("nope")

        transport.set_presence = broken_presence
        session, _ = make_session(transport, ["1\n", "1\n", "hi\n"])
        assert await session.run() == 0
        assert transport.sent == [("c1", "hi")]

    @pytest.mark.asyncio
    async def test_backlog_printed_when_enabled(self, transport):
        transport.history["c1"] = [
            InboundMessage(channel_id="c1", author=Member(id="1", username="alice"), content="earlier")
        ]
        config = DiscoConfig(
            discord=DiscordConfig(token="t"),
            display=DisplayConfig(load_backlog=True, messages=5),
            notifier=NotifyConfig(command="true"),
            hide_timestamps=True,
        )
        session, writer = make_session(transport, ["1\n", "1\n"], config=config)
        await session.run()
        assert "<alice> earlier" in output_of(writer)


class TestInteractionLoop:
    @pytest.mark.asyncio
    async def test_quit_variants_send_nothing(self, transport):
        for quit_line in ("\n", ":q\n"):
            transport.sent.clear()
            session, _ = make_session(transport, ["1\n", "1\n", quit_line, "never sent\n"])
            await session.run()
            assert transport.sent == []

    @pytest.mark.asyncio
    async def test_eof_ends_loop(self, transport):
        session, _ = make_session(transport, ["1\n", "1\n", "one\n", "two\n"])
        assert await session.run() == 0
        assert [text for _, text in transport.sent] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_fenced_block_sent_verbatim(self, transport):
        lines = ["1\n", "1\n", "```\n", "hello @bob\n", "```\n", ":q\n"]
        session, _ = make_session(transport, lines)
        await session.run()
        assert transport.sent == [("c1", "```\nhello @bob\n```\n")]
        assert transport.member_calls == []

    @pytest.mark.asyncio
    async def test_mentions_resolved_before_send(self, transport):
        session, _ = make_session(transport, ["1\n", "1\n", "hey @bob and @ali\n"])
        await session.run()
        assert transport.sent == [("c1", "hey <@102> and <@101>")]

    @pytest.mark.asyncio
    async def test_send_failure_does_not_stop_loop(self, transport):
        session, writer = make_session(transport, ["1\n", "1\n", "first\n", "second\n"])
        await session.start()
        transport.send_error = RuntimeError("rate limited")
        line = await session.classifier.next_line()
        await session.dispatcher.dispatch(line.payload)
        transport.send_error = None
        await session.interaction_loop()
        await session.shutdown()
        assert transport.sent == [("c1", "second")]
        assert "Error: rate limited" in output_of(writer)

    @pytest.mark.asyncio
    async def test_command_lines_are_not_sent(self, transport):
        session, writer = make_session(transport, ["1\n", "1\n", ":s\n", ":me waves\n"])
        await session.run()
        assert transport.sent == [("c1", "*waves*")]
        assert "Current: plan9 / #general" in output_of(writer)

    @pytest.mark.asyncio
    async def test_channel_switch_redirects_sends(self, transport):
        lines = ["1\n", "1\n", "a\n", ":c\n", "2\n", "b\n"]
        session, _ = make_session(transport, lines)
        await session.run()
        assert transport.sent == [("c1", "a"), ("c2", "b")]

    @pytest.mark.asyncio
    async def test_inbound_printer_stopped_on_shutdown(self, transport):
        session, _ = make_session(transport, ["1\n", "1\n"])
        await session.run()
        assert session.printer._task is None
