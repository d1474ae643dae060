"""Queries against the pacman database.

Only the textual interface is used:
  -Qqm        foreign package names, one per line
  -Ql PKG     "PKG /path" per owned file
  -Qi NAME    key/value info block, we read the Version line
  -Fq PATH    "repo/pkg" per sync-db package owning PATH
"""

from ._env import run_tool
from .errors import ToolError


def list_foreign_packages(pacman="pacman"):
    """Return the names of installed packages not found in any sync repo."""
    cmd = [pacman, "-Qqm"]
    result = run_tool(cmd, check=False)
    if result.returncode != 0:
        # pacman exits 1 with no output when nothing matches
        if not result.stdout.strip() and not result.stderr.strip():
            return []
        raise ToolError(cmd, result.returncode, result.stderr.strip())
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def list_package_files(package, pacman="pacman"):
    """Return the paths owned by *package*, in pacman's listing order.

    Directories are listed too (with a trailing slash); callers filter.
    """
    result = run_tool([pacman, "-Ql", package])
    files = []
    for line in result.stdout.splitlines():
        parts = line.split(" ", 1)
        if len(parts) == 2 and parts[1]:
            files.append(parts[1])
    return files


def package_version(name, pacman="pacman"):
    """Return the raw Version value from ``pacman -Qi NAME``, or None."""
    result = run_tool([pacman, "-Qi", name])
    for line in result.stdout.splitlines():
        if line.startswith("Version"):
            _key, sep, value = line.partition(":")
            if not sep:
                return None
            return value.strip()
    return None


def owners_of_path(path, pacman="pacman"):
    """Return sync-db package names owning *path*, in pacman's order.

    An unknown path is not an error: pacman exits non-zero and prints
    nothing, which yields an empty list.
    """
    result = run_tool([pacman, "-Fq", path], check=False)
    owners = []
    for line in result.stdout.splitlines():
        _repo, sep, package = line.strip().partition("/")
        if sep and package:
            owners.append(package)
    return owners
