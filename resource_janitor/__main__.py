"""
Allow running the janitor as a Python module.

Usage:
    python -m resource_janitor --path s3://bucket/key

This is equivalent to running the ``resource-janitor`` console script.
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
