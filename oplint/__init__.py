"""Static checker for Go `op` constants."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("oplint")
except PackageNotFoundError:
    __version__ = "0.0.0"
