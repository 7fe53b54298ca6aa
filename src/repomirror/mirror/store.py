import asyncio
import shutil
from pathlib import Path

from repomirror.command import CommandRunner
from repomirror.errors import FilesystemError
from repomirror.globals import Globals
from repomirror.identity import derive_identity
from repomirror.log import logger
from repomirror.sync.target import SyncTarget


class LocalMirror:
    """
    The on-disk mirror clone of one repository pair.

    The clone lives in `repos_dir/<identity>`. Fetches come from the source URL,
    pushes go to the target URL. All git commands are run through `runner`.
    """

    def __init__(self, repos_dir, target: SyncTarget, runner: CommandRunner):
        self.repos_dir = Path(repos_dir)
        self.target = target
        self.runner = runner
        self.identity = derive_identity(target)
        self.path = self.repos_dir / self.identity

    def __str__(self) -> str:
        return self.path.as_posix()

    def exists(self) -> bool:
        return self.path.exists()

    async def clean(self):
        """
        Remove the mirror directory and everything in it, if it exists.

        Raises:
            FilesystemError: The directory could not be removed.
        """
        logger.info(f"Cleaning local mirror {self.identity} for {self.target.describe()}")
        if not self.exists():
            logger.debug(f"Local mirror {self.path} does not exist, nothing to clean.")
            return

        try:
            await asyncio.to_thread(shutil.rmtree, self.path)
        except OSError as e:
            raise FilesystemError(self.path, e.strerror or str(e)) from e
        logger.debug(f"Local mirror {self.path} removed.")

    async def discard(self):
        """
        Remove a partially set up mirror so that the next start sets it up again.

        Failure to remove the directory is logged as a warning.
        """
        if not self.exists():
            return

        try:
            await asyncio.to_thread(shutil.rmtree, self.path)
            logger.debug(f"Incomplete local mirror {self.path} removed.")
        except OSError as e:
            logger.warning(f"Failed to remove incomplete local mirror {self.path}: {e}")

    async def clone(self):
        """
        Create the mirror directory and clone all refs of the source into it.

        Raises:
            FilesystemError: The directory could not be created.
            LaunchError, CommandError: git failed.
        """
        logger.info(f"Cloning source repository {self.target.source}")
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(self.path, e.strerror or str(e)) from e

        await self.runner.run(
            Globals.GIT_BIN,
            ["clone", "--mirror", self.target.source, str(self.path)],
            cwd=self.repos_dir,
        )

    async def set_push_target(self):
        """Point pushes of the default remote at the target, fetches stay on the source."""
        logger.info(f"Adding mirror target {self.target.target} to push")
        await self.runner.run(
            Globals.GIT_BIN,
            ["remote", "set-url", "--push", "origin", self.target.target],
            cwd=self.path,
        )

    def setup_steps(self):
        """
        Steps that recreate the mirror from scratch, in the order they must run.

        Returns:
            list[tuple[str, Callable]]: (step name, coroutine function) pairs.
        """
        return [
            ("clean", self.clean),
            ("clone", self.clone),
            ("set push target", self.set_push_target),
        ]

    async def fetch(self):
        logger.info(f"Fetching updates from {self.target.source}")
        await self.runner.run(Globals.GIT_BIN, ["fetch", "-p", "origin"], cwd=self.path)

    async def push(self):
        logger.info(f"Pushing updates to {self.target.target}")
        await self.runner.run(Globals.GIT_BIN, ["push", "--mirror", "--force"], cwd=self.path)
