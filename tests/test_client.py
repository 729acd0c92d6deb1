"""Tests for the command line client."""

import asyncio

import pytest

from dyndesk.client import run_client
from dyndesk.models import ExitCode


def answer(response, received):
    async def handler(reader, writer):
        received.append((await reader.readline()).decode())
        writer.write(response.encode())
        await writer.drain()
        writer.close()

    return handler


@pytest.fixture
def control(tmp_path, monkeypatch):
    path = str(tmp_path / "ctl.sock")
    monkeypatch.setattr("dyndesk.constants.CONTROL", path)
    return path


async def run_against(control, response, args):
    received = []
    server = await asyncio.start_unix_server(answer(response, received), control)
    async with server:
        with pytest.raises(SystemExit) as exc:
            await run_client(args)
    return exc.value.code, received


@pytest.mark.asyncio
async def test_success(control, capsys):
    code, received = await run_against(control, "OK\n1.0.0\n", ["version"])
    assert code == ExitCode.SUCCESS
    assert received == ["version\n"]
    assert capsys.readouterr().out == "1.0.0\n"


@pytest.mark.asyncio
async def test_arguments_are_joined(control):
    _, received = await run_against(control, "OK\n", ["compact", "now"])
    assert received == ["compact now\n"]


@pytest.mark.asyncio
async def test_error(control, capsys):
    code, _ = await run_against(control, 'ERROR: Unknown command "foo"\n', ["foo"])
    assert code == ExitCode.COMMAND_ERROR
    assert 'Error: Unknown command "foo"\n' in capsys.readouterr().err


@pytest.mark.asyncio
async def test_no_daemon(control):
    with pytest.raises(SystemExit) as exc:
        await run_client(["version"])
    assert exc.value.code == ExitCode.CONNECTION_ERROR
