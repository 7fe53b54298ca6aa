import argparse
import math
import os
from pathlib import Path

import yaml

from repomirror.errors import ConfigError
from repomirror.globals import Globals
from repomirror.log import logger
from repomirror.sync.target import Config, SyncTarget


def find_config_file(file_names=Globals.DEFAULT_CONFIG_FILES):
	"""
	Looks for a configuration file in the default configuration directories.

	Returns:
		str: Path of the first existing file, or the first of `file_names` if none was found
		(so that the subsequent error message names the expected file).
	"""
	for config_dir in Globals.DEFAULT_CONFIG_DIRS:
		for file_name in file_names:
			candidate = os.path.join(os.path.expanduser(config_dir), file_name)
			if os.path.isfile(candidate):
				logger.debug(f"Using configuration file \"{candidate}\".")
				return candidate
	return file_names[0]


def parse_config(path_to_config):
	"""
	Parses a YAML (or JSON) configuration file that defines the repositories to be mirrored.

	Returns:
		dict: The raw configuration data, or None if the file is missing or malformed.
	"""
	try:
		with open(path_to_config) as f:
			config = yaml.safe_load(f)
	except FileNotFoundError:
		logger.error(f"Configuration file \"{path_to_config}\" not found.")
		return None
	except yaml.YAMLError as e:
		logger.error(f"Configuration file \"{path_to_config}\" is not valid YAML: {e}")
		return None

	if not isinstance(config, dict):
		logger.error(f"Configuration file \"{path_to_config}\" must contain a mapping.")
		return None

	logger.debug(f"Configuration contains {len(config.get('syncRepositories') or [])} repository pairs.")
	return config


def _require_bool(raw, key, default):
	value = raw.get(key, default)
	if not isinstance(value, bool):
		raise ConfigError(f"\"{key}\" must be true or false, got {value!r}.")
	return value


def _positive_number(key, value):
	if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
		raise ConfigError(f"\"{key}\" must be a positive number, got {value!r}.")
	return value


def _parse_targets(entries):
	if not isinstance(entries, list):
		raise ConfigError("\"syncRepositories\" must be a list of {source, target} entries.")

	targets = []
	for i, entry in enumerate(entries, 1):
		if not isinstance(entry, dict):
			raise ConfigError(f"Repository entry {i} must be a mapping with \"source\" and \"target\".")
		source = entry.get("source")
		target = entry.get("target")
		if not isinstance(source, str) or not source:
			raise ConfigError(f"Repository entry {i} has no \"source\" URL.")
		if not isinstance(target, str) or not target:
			raise ConfigError(f"Repository entry {i} has no \"target\" URL.")
		targets.append(SyncTarget(source=source, target=target))
	return tuple(targets)


def build_config(raw, args=None):
	"""
	Validates the raw configuration and merges command-line overrides into it.

	Parameters:
		raw (dict): Data returned by `parse_config`.
		args (dict): Arguments returned by `get_sync_arguments`. Values that are None
			(or False for the switches) leave the configuration untouched.

	Returns:
		Config: The immutable configuration for this process.

	Raises:
		ConfigError: If a key is missing or has an invalid value.
	"""
	args = args or {}

	if "syncRepositories" not in raw:
		raise ConfigError("\"syncRepositories\" is missing.")
	targets = _parse_targets(raw["syncRepositories"])

	clean_repo_on_run = _require_bool(raw, "cleanRepoOnRun", False) or bool(args.get("clean"))
	only_run_once = _require_bool(raw, "onlyRunOnce", False) or bool(args.get("once"))

	interval = args.get("interval")
	if interval is None:
		if "syncIntervalSeconds" not in raw and not only_run_once:
			raise ConfigError("\"syncIntervalSeconds\" is missing.")
		interval = raw.get("syncIntervalSeconds", 60)
	interval = _positive_number("syncIntervalSeconds", interval)

	timeout = args.get("timeout")
	if timeout is None:
		timeout = raw.get("commandTimeoutSeconds")
	if timeout is not None:
		timeout = _positive_number("commandTimeoutSeconds", timeout)

	repos_dir = args.get("repos_dir") or raw.get("reposDir") or Globals.DEFAULT_REPOS_DIR
	if not isinstance(repos_dir, str):
		raise ConfigError(f"\"reposDir\" must be a path, got {repos_dir!r}.")

	return Config(
		clean_repo_on_run=clean_repo_on_run,
		only_run_once=only_run_once,
		sync_interval_seconds=interval,
		sync_repositories=targets,
		repos_dir=Path(repos_dir).expanduser().absolute(),
		command_timeout_seconds=timeout,
	)


def get_sync_arguments(argv=None):
	"""
	Parses the command-line arguments of repomirror.

	Returns:
		dict: Parsed arguments. Options that were not given are None.
	"""
	parser = argparse.ArgumentParser(description="Continuously mirrors source git repositories onto target repositories.")
	parser.add_argument("--config", type=str, help="Path to the configuration YAML/JSON file")
	parser.add_argument("--once", action="store_true", help="Run a single sync cycle per repository, then exit.")
	parser.add_argument("--clean", action="store_true", help="Recreate all local mirrors before syncing.")
	parser.add_argument("--interval", type=float, help="Seconds between the starts of two sync cycles.")
	parser.add_argument("--repos-dir", type=str, help="Directory holding the local mirror clones.")
	parser.add_argument("--timeout", type=float, help="Kill git commands running longer than this many seconds.")
	parser.add_argument("--verbose", "-v", action="store_true", help="Print debug output.")
	args = parser.parse_args(argv)

	# Check if user provided a configuration file
	config_file = args.config if args.config is not None else find_config_file()

	return {
		"config_file": config_file,
		"once": args.once,
		"clean": args.clean,
		"interval": args.interval,
		"repos_dir": args.repos_dir,
		"timeout": args.timeout,
		"verbose": args.verbose}
