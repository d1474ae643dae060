"""Exceptions raised by the audit."""


class AuditError(Exception):
    """Base class for every error the audit reports to the operator."""


class ToolError(AuditError):
    """An external tool could not be run or exited with failure."""

    def __init__(self, cmd, returncode, stderr=""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            msg = f"failed to run {' '.join(self.cmd)}: {stderr}"
        else:
            msg = f"{' '.join(self.cmd)} exited with status {returncode}"
            if stderr:
                msg += f": {stderr}"
        super().__init__(msg)


class ConfigError(AuditError):
    """The configuration file is unreadable or holds invalid values."""


class VersionParseError(AuditError):
    """The package manager printed a version we cannot parse."""
