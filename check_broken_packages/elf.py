"""ELF artifact discovery and dynamic-linker queries.

Artifacts are the files of a package worth handing to ldd: anything with
an execute bit, plus unversioned shared objects sitting directly in a
top-level library directory (/usr/lib/libfoo.so), which are often
installed without +x.
"""

import os
import stat

from . import log
from ._env import run_tool
from .errors import ToolError

_NOT_FOUND = "=> not found"


def resolve_one_hop(path):
    """Follow a single symlink hop, or return *path* unchanged.

    Relative link targets are taken relative to the link's directory.
    """
    try:
        target = os.readlink(path)
    except OSError:
        return path
    return os.path.normpath(os.path.join(os.path.dirname(path), target))


def is_shared_object_path(path):
    """True for /a/b/libfoo.so style paths: three slashes, plain .so suffix."""
    return path.count("/") == 3 and path.endswith(".so")


def qualifies(path, mode):
    """Check the artifact rule against an already stat'ed mode."""
    if not stat.S_ISREG(mode):
        return False
    return bool(mode & 0o111) or is_shared_object_path(path)


def is_artifact(path):
    """True if *path* (already resolved) is a regular executable or top-level .so."""
    try:
        st = os.stat(path)
    except OSError:
        return False
    return qualifies(path, st.st_mode)


def find_artifacts(paths):
    """Resolve each path one hop and keep those that are artifacts.

    Listing order is preserved.
    """
    artifacts = []
    for path in paths:
        resolved = resolve_one_hop(path)
        if is_artifact(resolved):
            artifacts.append(resolved)
    return artifacts


def is_blacklisted(path, blacklist):
    return any(path.startswith(prefix) for prefix in blacklist)


def parse_missing(ldd_output):
    """Extract unresolved sonames from ldd output, in order of appearance."""
    missing = []
    for line in ldd_output.splitlines():
        if not line.endswith(_NOT_FOUND):
            continue
        fields = line.split()
        if fields:
            missing.append(fields[0])
    return missing


def missing_dependencies(artifact, ldd="ldd"):
    """Return the sonames the loader cannot resolve for *artifact*.

    ldd exits non-zero for files it cannot handle (scripts, static
    binaries); those simply have nothing missing.
    """
    result = run_tool([ldd, artifact], check=False)
    if result.returncode != 0:
        return []
    return parse_missing(result.stdout)


def direct_needed(artifact, patchelf="patchelf"):
    """Return the DT_NEEDED entries recorded in *artifact* itself."""
    result = run_tool([patchelf, "--print-needed", artifact])
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def is_direct_dependency(artifact, soname, patchelf="patchelf"):
    """True if *soname* is one of *artifact*'s own NEEDED entries.

    When patchelf is missing or fails the answer is True, so the package
    still shows up in the per-package report.
    """
    try:
        needed = direct_needed(artifact, patchelf)
    except ToolError as e:
        log.debug(f"treating {soname} as direct for {artifact}: {e}")
        return True
    return soname in needed


def provider_lookup_key(soname):
    """Map a soname to the file name searched in the files database.

    "libfoo.so.3" -> "libfoo.so", "/usr/lib/libbar.so.1.2" -> "libbar.so".
    """
    name = soname.rsplit("/", 1)[-1]
    idx = name.find(".so")
    if idx < 0:
        return name
    return name[:idx + len(".so")]
