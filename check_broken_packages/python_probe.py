"""Find packages with files in stale Python library directories.

After a minor Python upgrade, /usr/lib/python3.N/ of the previous minor
version is no longer on sys.path, so anything still installed there is
dead until the owning package is rebuilt.
"""

from __future__ import annotations

import glob
import os
from dataclasses import dataclass

from . import log
from .errors import AuditError, VersionParseError
from .pacman import owners_of_path, package_version


@dataclass(frozen=True)
class PythonPackageVersion:
    """pacman version of the python package: MAJOR.MINOR.RELEASE-PKGREL."""
    major: int
    minor: int
    release: int
    package: int

    def __str__(self):
        return f"{self.major}.{self.minor}.{self.release}-{self.package}"


def parse_version(value):
    """Parse "3.12.1-1" into a PythonPackageVersion."""
    parts = value.strip().split(".", 2)
    if len(parts) != 3:
        raise VersionParseError(f"unable to parse Python version {value!r}")
    release, sep, pkgrel = parts[2].partition("-")
    if not sep:
        raise VersionParseError(f"unable to parse Python version release/package part of {value!r}")
    try:
        return PythonPackageVersion(int(parts[0]), int(parts[1]), int(release), int(pkgrel))
    except ValueError as e:
        raise VersionParseError(f"unable to parse Python version {value!r}: {e}") from e


def current_python_version(python_package="python", pacman="pacman"):
    value = package_version(python_package, pacman)
    if value is None:
        raise VersionParseError("unexpected pacman output: unable to find version line")
    return parse_version(value)


def broken_python_packages(version, lib_root="/usr/lib", pacman="pacman"):
    """Return (package, directory) pairs for stale interpreter directories.

    Each pair is reported once, in the order first seen.
    """
    current = os.path.join(lib_root, f"python{version.major}.{version.minor}")
    pairs = []
    for python_dir in sorted(glob.glob(os.path.join(lib_root, f"python{version.major}*"))):
        if python_dir == current:
            continue
        for package in owners_of_path(python_dir, pacman):
            pair = (package, python_dir)
            if pair not in pairs:
                pairs.append(pair)
    return pairs


def probe(config):
    """Run the whole probe; failures degrade to an empty result."""
    try:
        version = current_python_version(config.python_package, config.pacman)
    except AuditError as e:
        log.error(f"failed to get Python version: {e}")
        return []
    log.debug(f"Python version: {version}")

    try:
        return broken_python_packages(version, config.python_lib_root, config.pacman)
    except AuditError as e:
        log.error(f"failed to list Python packages: {e}")
        return []
