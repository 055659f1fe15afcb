"""Version of the installed pumpfun-sdk distribution, read from its metadata."""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "pumpfun-sdk"

try:
    __version__ = version(DISTRIBUTION_NAME)
except PackageNotFoundError:
    # running from a source tree that was never installed
    __version__ = "0.0.0"


def get_version() -> str:
    return __version__


def get_version_info() -> dict:
    """Split the release into numeric major, minor and patch parts."""
    release = __version__.split("+")[0].split(".")
    major, minor, patch = (int(part) for part in (release + ["0", "0"])[:3])
    return {"version": __version__, "major": major, "minor": minor, "patch": patch}
