import asyncio
from pathlib import Path

import pytest

from repomirror.command import render_command
from repomirror.errors import CommandError, LaunchError
from repomirror.sync.target import Config, SyncTarget


class RecordingRunner:
    """
    Stands in for CommandRunner: records every git invocation instead of running it.

    `fail` is called with (program, args, cwd) and returns an exit code to fail with,
    "launch" to simulate a missing executable, or None to succeed. `delay` maps a git
    subcommand to the seconds it takes.
    """

    def __init__(self, fail=None, delay=None):
        self.calls = []
        self.events = []
        self.fail = fail
        self.delay = delay or {}

    async def run(self, program, args, cwd):
        args = list(args)
        loop = asyncio.get_running_loop()
        self.calls.append((program, args, Path(cwd)))
        self.events.append(("start", args[0], Path(cwd), loop.time()))

        if args[0] in self.delay:
            await asyncio.sleep(self.delay[args[0]])

        self.events.append(("end", args[0], Path(cwd), loop.time()))

        outcome = self.fail(program, args, Path(cwd)) if self.fail else None
        if outcome == "launch":
            raise LaunchError(program, "No such file or directory")
        if outcome is not None:
            raise CommandError(outcome, render_command(program, args))

    def subcommands(self, cwd=None):
        return [args[0] for _, args, call_cwd in self.calls if cwd is None or call_cwd == cwd]


async def wait_until(condition, timeout=5.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def target():
    return SyncTarget(source="https://example.com/src/project.git", target="git@example.org:mirror/project.git")


@pytest.fixture
def make_config(tmp_path):
    def _make_config(targets=(), **kwargs):
        kwargs.setdefault("repos_dir", tmp_path / "repos")
        return Config(sync_repositories=tuple(targets), **kwargs)
    return _make_config
