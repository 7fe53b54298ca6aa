import asyncio
from typing import List, Optional

from repomirror.command import CommandRunner
from repomirror.errors import FilesystemError
from repomirror.identity import derive_identity
from repomirror.log import logger
from repomirror.sync.scheduler import SyncScheduler
from repomirror.sync.target import Config


class SyncOrchestrator:
    """
    Starts one independent sync task per unique repository pair.

    Pairs that derive the same identity would share a local mirror, so only
    the first of them is scheduled and the others are dropped with a warning.
    Every task is its own failure domain: an error escaping one scheduler is
    logged and the remaining schedulers keep running.
    """

    def __init__(self, config: Config, runner: Optional[CommandRunner] = None):
        self.config = config
        self.runner = runner if runner is not None else CommandRunner(config.command_timeout_seconds)
        self.schedulers = self._build_schedulers()
        self._tasks: List[asyncio.Task] = []

    def _build_schedulers(self) -> List[SyncScheduler]:
        schedulers = []
        seen = set()
        for target in self.config.sync_repositories:
            identity = derive_identity(target)
            if identity in seen:
                logger.warning(f"Ignoring duplicate repository pair {target.describe()}")
                continue
            seen.add(identity)
            schedulers.append(SyncScheduler(target, self.config, self.runner))

        logger.debug(f"Created {len(schedulers)} sync scheduler(s).")
        return schedulers

    async def _supervise(self, scheduler: SyncScheduler) -> bool:
        try:
            return await scheduler.run()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Sync task for {scheduler.target.describe()} stopped unexpectedly")
            return False

    async def run(self) -> bool:
        """
        Run all schedulers until each of them has finished.

        With at least one recurring target this never returns on its own.

        Returns:
            bool: True if every scheduler finished without failures.
        """
        if not self.schedulers:
            logger.warning("No repositories configured, nothing to synchronize.")
            return True

        try:
            self.config.repos_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(self.config.repos_dir, e.strerror or str(e)) from e

        logger.info(f"Synchronizing {len(self.schedulers)} repository pair(s)")
        self._tasks = [asyncio.create_task(self._supervise(scheduler)) for scheduler in self.schedulers]
        results = await asyncio.gather(*self._tasks)
        self._tasks = []

        failed = results.count(False)
        if failed:
            logger.error(f"{failed} of {len(results)} repository pair(s) failed to synchronize.")
        else:
            logger.info("All repository pairs synchronized.")
        return failed == 0

    async def stop(self):
        """Cancel all running sync tasks and wait until they are gone."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Sync tasks stopped")
