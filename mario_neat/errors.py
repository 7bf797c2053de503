class NeatError(Exception):
    """Base class for errors raised by the NEAT agent."""


class PreconditionViolation(NeatError):
    """An operation was requested on a pool, species or genome that cannot support it."""


class ApiMisuse(NeatError):
    """The driving loop called the agent out of order (e.g. advancing while still playing)."""
