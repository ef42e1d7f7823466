"""autoreview: automated mentoring verdicts for exercise solutions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("autoreview")
except PackageNotFoundError:
    __version__ = "dev"
