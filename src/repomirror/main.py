#!/usr/bin/env python3

"""
main.py

Continuously mirrors source git repositories onto target repositories. Every configured
pair gets a local mirror clone that is fetched from the source and force-pushed to the
target on a fixed interval, or exactly once.
"""

import asyncio
import sys

from repomirror.errors import MirrorError
from repomirror.log import logger
from repomirror.sync.orchestrator import SyncOrchestrator
from repomirror.utils import init


def main(argv=None):

    # 1. Init repomirror
    config = init(argv)
    if config is None:
        return 1

    # 2. Synchronize repositories
    orchestrator = SyncOrchestrator(config)
    try:
        succeeded = asyncio.run(orchestrator.run())
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping.")
        return 130
    except MirrorError as e:
        logger.error(str(e))
        return 1

    return 0 if succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
