import asyncio
import shlex
from typing import Optional, Sequence

from repomirror.errors import CommandError, CommandTimeoutError, LaunchError
from repomirror.log import logger


def render_command(program: str, args: Sequence[str]) -> str:
    return shlex.join([program, *args])


class CommandRunner:
    """
    Runs external programs on behalf of the sync tasks.

    The child inherits the standard streams of this process, so git progress
    output shows up live on the console. The calling task is suspended until
    the child exits, other tasks keep running meanwhile.

    Parameters:
        timeout (Optional[float]): Seconds after which a still running child is
            killed. None (the default) waits indefinitely.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def run(self, program: str, args: Sequence[str], cwd) -> None:
        """
        Run `program` with `args` in the working directory `cwd`.

        Raises:
            LaunchError: The program could not be started.
            CommandError: The program exited with a nonzero code.
            CommandTimeoutError: The program was killed after `timeout` seconds.
        """
        command_line = render_command(program, args)
        logger.debug(f"Running \"{command_line}\" in {cwd}")

        try:
            process = await asyncio.create_subprocess_exec(program, *args, cwd=str(cwd))
        except OSError as e:
            raise LaunchError(program, e.strerror or str(e)) from e

        try:
            code = await asyncio.wait_for(process.wait(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandTimeoutError(command_line, self.timeout)
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        if code != 0:
            raise CommandError(code, command_line)
