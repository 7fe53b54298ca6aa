from typing import Optional


class MirrorError(Exception):
    """Base class for failures of a setup step or a sync cycle step."""


class LaunchError(MirrorError):
    """The external program could not be started at all."""

    def __init__(self, program: str, reason: str):
        self.program = program
        self.reason = reason
        super().__init__(f"Failed to start \"{program}\": {reason}")


class CommandError(MirrorError):
    """The external program ran and exited with a nonzero code."""

    def __init__(self, code: Optional[int], command: str):
        self.code = code
        self.command = command
        super().__init__(f"Command \"{command}\" failed with exit code {code}")


class CommandTimeoutError(CommandError):
    """The external program was killed after exceeding the command timeout."""

    def __init__(self, command: str, timeout: float):
        self.timeout = timeout
        super().__init__(None, command)
        self.args = (f"Command \"{command}\" timed out after {timeout} seconds",)


class FilesystemError(MirrorError):
    """Creating or removing a local mirror directory failed."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Filesystem operation on \"{path}\" failed: {reason}")


class ConfigError(Exception):
    """The configuration file is missing required keys or has invalid values."""
