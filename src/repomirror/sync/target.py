from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from repomirror.globals import Globals


@dataclass(frozen=True)
class SyncTarget:
    """
    A source repository and the target repository it is mirrored onto.

    Attributes:
        source (str): URL the local mirror fetches from.
        target (str): URL every cycle force-pushes all refs to.

    Methods:
        describe() -> str:
            Returns a human-readable description of the pair for log lines.
    """
    source: str
    target: str

    def describe(self) -> str:
        return f"{self.source}  -->  {self.target}"


@dataclass(frozen=True)
class Config:
    """
    Process-wide settings, read once at startup and never modified.

    Attributes:
        clean_repo_on_run (bool): Always recreate local mirrors before the first cycle.
        only_run_once (bool): Run exactly one cycle per target instead of repeating.
        sync_interval_seconds (float): Minimum time between the starts of two cycles.
        sync_repositories (Tuple[SyncTarget, ...]): Configured pairs, in file order.
        repos_dir (Path): Root directory holding one mirror clone per pair.
        command_timeout_seconds (Optional[float]): Kill git after this long, None waits forever.
    """
    clean_repo_on_run: bool = False
    only_run_once: bool = False
    sync_interval_seconds: float = 60
    sync_repositories: Tuple[SyncTarget, ...] = ()
    repos_dir: Path = field(default_factory=lambda: Path.cwd() / Globals.DEFAULT_REPOS_DIR)
    command_timeout_seconds: Optional[float] = None
