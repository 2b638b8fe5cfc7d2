#!/usr/bin/env python3
"""
Entry point for the rbdvol CLI tool.
"""

import sys

from docker_volume_rbd.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
