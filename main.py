#!/usr/bin/env python3
"""Launcher entry point"""

import sys

from craftlaunch.__main__ import main

if __name__ == "__main__":
    # Fast startup
    sys.dont_write_bytecode = True
    sys.exit(main())
