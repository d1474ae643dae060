"""Enabled systemd units whose symlinks point at nothing.

`systemctl enable` drops symlinks into *.target.wants/ (and .requires/,
.upholds/) directories.  Removing the package that shipped the unit
leaves those links dangling.
"""

import glob
import os


def enabled_service_links(unit_globs):
    """Return every symlink inside the directories matched by *unit_globs*.

    Directories that vanish or cannot be listed are skipped.
    """
    links = []
    for pattern in unit_globs:
        for unit_dir in sorted(glob.glob(pattern)):
            try:
                entries = sorted(os.scandir(unit_dir), key=lambda e: e.name)
            except OSError:
                continue
            for entry in entries:
                if entry.is_symlink():
                    links.append(entry.path)
    return links


def is_broken_link(link):
    """True if *link*'s target (one hop, then followed) does not exist."""
    try:
        target = os.readlink(link)
    except OSError:
        # not a link anymore; nothing to judge
        return False
    target = os.path.join(os.path.dirname(link), target)
    try:
        os.stat(target)
    except OSError:
        return True
    return False


def broken_service_links(links):
    return [link for link in links if is_broken_link(link)]
