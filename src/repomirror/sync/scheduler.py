import asyncio
import enum
from typing import Optional

from repomirror.command import CommandRunner
from repomirror.errors import MirrorError
from repomirror.log import logger
from repomirror.mirror.store import LocalMirror
from repomirror.sync.target import Config, SyncTarget


class SchedulerState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SETTING_UP = "setting up"
    FAILED_SETUP = "failed setup"
    READY = "ready"
    RUNNING_CYCLE = "running cycle"
    DONE = "done"


class SyncScheduler:
    """
    Drives setup and the recurring fetch/push cycle of one repository pair.

    The first cycle starts as soon as setup is done. The next one starts when
    the previous cycle has finished and at least `sync_interval_seconds` have
    passed since it started, so cycles of one mirror never overlap. A failed
    cycle is logged and the schedule goes on, the next cycle is the retry.
    """

    def __init__(self, target: SyncTarget, config: Config, runner: CommandRunner):
        self.target = target
        self.config = config
        self.mirror = LocalMirror(config.repos_dir, target, runner)
        self.state = SchedulerState.UNINITIALIZED
        self.cycles_run = 0
        self.failures = 0
        self.last_error: Optional[MirrorError] = None
        self._in_flight = False

    @property
    def identity(self) -> str:
        return self.mirror.identity

    def needs_setup(self) -> bool:
        # An existing directory is trusted to be a correctly configured mirror
        return self.config.clean_repo_on_run or not self.mirror.exists()

    async def setup(self) -> bool:
        """
        Prepare the local mirror, recreating it when required.

        Returns:
            bool: True if the mirror is ready for cycles, False if a step failed.
        """
        self.state = SchedulerState.SETTING_UP

        if not self.needs_setup():
            logger.info(f"Reusing existing local mirror {self.mirror} for {self.target.describe()}")
            self.state = SchedulerState.READY
            return True

        for step, run_step in self.mirror.setup_steps():
            try:
                await run_step()
            except MirrorError as e:
                logger.error(
                    f"Setup step \"{step}\" failed for {self.target.describe()} "
                    f"(mirror {self.identity}): {e}"
                )
                self.last_error = e
                self.state = SchedulerState.FAILED_SETUP
                # A leftover directory would be trusted as a ready mirror on the next start
                await self.mirror.discard()
                return False

        logger.info(f"Local mirror {self.identity} is ready for {self.target.describe()}")
        self.state = SchedulerState.READY
        return True

    async def run_cycle(self) -> bool:
        """
        Fetch from the source, then force-push all refs to the target.

        The push is skipped when the fetch failed. Failures are logged and
        recorded, never raised.

        Returns:
            bool: True if both steps succeeded. False if a step failed or
            another cycle of this mirror was still running.
        """
        if self._in_flight:
            logger.warning(f"Skipping cycle for {self.target.describe()}, previous cycle still running.")
            return False

        self._in_flight = True
        self.state = SchedulerState.RUNNING_CYCLE
        self.cycles_run += 1
        step = "fetch"
        try:
            await self.mirror.fetch()
            step = "push"
            await self.mirror.push()
        except MirrorError as e:
            self.failures += 1
            self.last_error = e
            logger.error(f"Sync step \"{step}\" failed for {self.target.describe()}: {e}")
            return False
        finally:
            self._in_flight = False
            self.state = SchedulerState.READY

        logger.info(f"Synchronized {self.target.describe()}")
        return True

    async def sync_now(self) -> bool:
        """Run one cycle out of schedule, e.g. for a manual refresh."""
        if self.state not in (SchedulerState.READY, SchedulerState.RUNNING_CYCLE, SchedulerState.DONE):
            logger.warning(f"Local mirror for {self.target.describe()} is not set up, cannot sync.")
            return False

        done = self.state == SchedulerState.DONE
        succeeded = await self.run_cycle()
        if done:
            self.state = SchedulerState.DONE
        return succeeded

    async def run(self) -> bool:
        """
        Set up the mirror and run the schedule.

        Returns only in single-shot mode or when setup failed.

        Returns:
            bool: True if setup and every cycle run succeeded.
        """
        logger.info(f"Starting git sync for {self.target.describe()}")
        if not await self.setup():
            return False

        if self.config.only_run_once:
            succeeded = await self.run_cycle()
            self.state = SchedulerState.DONE
            logger.info(f"Single run finished for {self.target.describe()}")
            return succeeded

        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            await self.run_cycle()
            elapsed = loop.time() - started
            delay = max(0.0, self.config.sync_interval_seconds - elapsed)
            logger.debug(f"Next cycle for {self.target.describe()} in {delay:.1f} seconds")
            await asyncio.sleep(delay)
