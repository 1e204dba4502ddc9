"""Tests for disco.notify.Notifier."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from disco.notify import Notifier


class TestBuildArgv:
    def test_geometry_passed_through(self):
        notifier = Notifier("statusmsg", ["-w", "10,10,260,90"])
        assert notifier.build_argv("bob: hi") == ["statusmsg", "-w", "10,10,260,90", "bob: hi"]

    def test_long_text_truncated(self):
        argv = Notifier("statusmsg").build_argv("x" * 500)
        assert len(argv[-1]) == 201
        assert argv[-1].endswith("…")


class TestNotify:
    @pytest.mark.asyncio
    async def test_launches_subprocess(self):
        with patch("disco.notify.asyncio.create_subprocess_exec", new=AsyncMock()) as spawn:
            assert await Notifier("statusmsg", ["-w", "1,2,3,4"]).notify("hello") is True
        args = spawn.await_args.args
        assert args == ("statusmsg", "-w", "1,2,3,4", "hello")

    @pytest.mark.asyncio
    async def test_missing_program_is_not_fatal(self):
        with patch(
            "disco.notify.asyncio.create_subprocess_exec",
            new=AsyncMock(side_effect=FileNotFoundError("statusmsg")),
        ):
            assert await Notifier("statusmsg").notify("hello") is False
