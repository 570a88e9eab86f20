"""Exception types raised on programming or configuration errors.

Unreachable poses and malformed sequencer invocations are not errors; they
resolve to empty results or logged no-ops.
"""


class Panda7Error(Exception):
    """Base class for panda7 errors."""


class JointVectorError(Panda7Error, ValueError):
    """A joint vector did not have the expected shape."""


class ConfigurationError(Panda7Error, ValueError):
    """A tunable or runtime setting is out of its valid range."""
