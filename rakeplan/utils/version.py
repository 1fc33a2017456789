"""Version tags for error messages and logs.

Solver failures are logged with the package version and, when running from
a git checkout, the commit hash, so a failing plan can be traced to the code
that produced it.
"""
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as dist_version
import subprocess


@lru_cache(maxsize=2)
def get_git_commit_hash(short: bool = True) -> str:
    """Get current git commit hash.

    Args:
        short: Return short hash (7 chars) if True, full hash if False

    Returns:
        Git commit hash or 'unknown' if not in a git repo
    """
    cmd = ['git', 'rev-parse', '--short', 'HEAD'] if short else ['git', 'rev-parse', 'HEAD']
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=1
        )
        return result.stdout.strip() or 'unknown'
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
        return 'unknown'


def get_package_version() -> str:
    """Installed rakeplan version, or 'dev' for an uninstalled checkout."""
    try:
        return dist_version('rakeplan')
    except PackageNotFoundError:
        return 'dev'


def get_version_string() -> str:
    """Get version string for logging and error messages.

    Returns:
        String like "rakeplan 0.1.0 git:aa5f6bd"
    """
    return f"rakeplan {get_package_version()} git:{get_git_commit_hash(short=True)}"


def format_error_with_version(error_message: str) -> str:
    """Format error message with the version tag.

    Example:
        >>> format_error_with_version("Model is infeasible")
        "Model is infeasible [rakeplan 0.1.0 git:aa5f6bd]"
    """
    return f"{error_message} [{get_version_string()}]"
