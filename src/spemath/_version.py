"""Installed version of spemath."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version


def get_version() -> str:
    """Version from the installed distribution metadata, or 0.0.0 from a bare checkout."""
    try:
        return _metadata_version("spemath")
    except PackageNotFoundError:
        return "0.0.0"
