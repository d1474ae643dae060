"""Shared subprocess environment for tool invocations.

pacman, ldd and patchelf print localized messages unless told otherwise,
and every parser in this package matches on the C-locale text ("=> not
found", "Version", ...).  Start from the caller's environment so PATH
and friends still resolve the tools, then pin the locale.
"""

import os
import subprocess

from .errors import ToolError

# Vars pinned to fixed values for parseable output.
_LOCALE_PINS = {
    "LANG": "C",
    "LC_ALL": "C",
}


def tool_env():
    """Return an env dict for subprocess env= with the locale pinned."""
    env = dict(os.environ)
    env.update(_LOCALE_PINS)
    return env


def run_tool(cmd, check=True):
    """Run *cmd* with the pinned locale and return the CompletedProcess.

    A missing binary always raises ToolError.  A non-zero exit raises
    ToolError only when *check* is set; otherwise the caller inspects
    returncode itself.
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="surrogateescape",
            env=tool_env(),
        )
    except OSError as e:
        raise ToolError(cmd, None, str(e)) from e
    if check and result.returncode != 0:
        raise ToolError(cmd, result.returncode, result.stderr.strip())
    return result
