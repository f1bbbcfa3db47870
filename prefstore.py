#!/usr/bin/env python3
# Command line entry point for prefstore; see prefstore_lib/cli.py
import sys

from prefstore_lib.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
