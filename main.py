"""
monocv - main entry point.
"""
import sys

from monocv.cli import main

if __name__ == "__main__":
    sys.exit(main())
