"""
Error types raised at the edges of the readiness tool.

Scoring itself never raises for missing files; these cover configuration
and report-input problems surfaced by the CLI.
"""


class ReadinessError(Exception):
    """Base class for errors reported to the user"""


class ConfigError(ReadinessError):
    """Invalid run options or repository config file"""


class ReportInputError(ReadinessError):
    """A prior report file could not be read or parsed"""
