"""Cross-run garbage collector for AWS resources."""

__version__ = "0.1.0"
