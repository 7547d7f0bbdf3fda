"""Installed package version."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lastpos")
except PackageNotFoundError:
    __version__ = "0+local"
