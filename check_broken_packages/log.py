"""Operator channel: messages for the person running the audit.

Everything here goes to stderr so stdout carries only the report.  Writes
go through tqdm's external write mode so an active progress bar is
cleared first and redrawn afterwards.
"""

import sys
import threading

import click
from tqdm import tqdm

_verbose = False
_lock = threading.Lock()


def set_verbose(flag):
    global _verbose
    _verbose = bool(flag)


def _emit(msg):
    with _lock:
        with tqdm.external_write_mode(file=sys.stderr):
            click.echo(msg, err=True)


def error(msg):
    _emit(f"error: {msg}")


def warning(msg):
    _emit(f"warning: {msg}")


def debug(msg):
    """Trace message, shown only in verbose mode."""
    if _verbose:
        _emit(click.style(f"debug: {msg}", dim=True))
