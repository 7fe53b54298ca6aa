import shutil

from repomirror.errors import ConfigError
from repomirror.globals import Globals
from repomirror.log import logger, set_verbose
from repomirror.parser import build_config, get_sync_arguments, parse_config


def check_system_dependencies():
    """
    Checks whether all required system binaries are available in the system's PATH.

    This function iterates over the list of required system binaries defined in
    `Globals.REQUIRED_SYSTEM_BINS` and uses `shutil.which` to verify their presence.
    If any binary is missing, an error is logged and the function returns False.
    If all binaries are found, it returns True.

    Returns:
        bool: True if all required binaries are found, False otherwise.
    """
    for current_bin in Globals.REQUIRED_SYSTEM_BINS:
        path = shutil.which(current_bin)
        if path is None:
            logger.error(f"repomirror requires {current_bin}. Please install it on your system.")
            return False
    return True


def init(argv=None):
    """
    Initializes repomirror by parsing CLI arguments, performing system checks
    and loading the configuration.

    Returns:
        Config: The validated configuration, or None if initialization failed.
    """
    args = get_sync_arguments(argv)
    set_verbose(args["verbose"])

    if not check_system_dependencies():
        return None

    raw_config = parse_config(args["config_file"])
    if raw_config is None:
        return None

    try:
        config = build_config(raw_config, args)
    except ConfigError as e:
        logger.error(f"Invalid configuration in \"{args['config_file']}\": {e}")
        return None

    print_welcome_banner(args["config_file"], config)
    return config


def print_welcome_banner(config_file, config):
    mode = "single run" if config.only_run_once else f"every {config.sync_interval_seconds:g}s"
    banner = fr"""
 _ __ ___ _ __   ___  _ __ ___ (_)_ __ _ __ ___  _ __
| '__/ _ \ '_ \ / _ \| '_ ` _ \| | '__| '__/ _ \| '__|
| | |  __/ |_) | (_) | | | | | | | |  | | | (_) | |
|_|  \___| .__/ \___/|_| |_| |_|_|_|  |_|  \___/|_|
         |_|

Config:       {config_file}
Repositories: {len(config.sync_repositories)}
Schedule:     {mode}
Mirrors:      {config.repos_dir}
"""
    print(banner)
