"""Exceptions raised while deriving, parsing or verifying SCRAM secrets."""


class ScramError(Exception):
    """Base class for all SCRAM-SHA-256 errors."""


class EmptyPasswordError(ScramError, ValueError):
    """Password has zero length."""


class InvalidEncodingError(ScramError, ValueError):
    """Password is not valid UTF-8."""


class InvalidIterationCountError(ScramError, ValueError):
    """PBKDF2 iteration count is not a positive integer."""


class RandomSourceError(ScramError):
    """System random source failed to produce salt bytes."""


class MalformedVerifierError(ScramError, ValueError):
    """Verifier string does not follow the SCRAM-SHA-256 format."""


class PasswordMismatchError(ScramError, ValueError):
    """Password confirmation does not match the first entry."""
