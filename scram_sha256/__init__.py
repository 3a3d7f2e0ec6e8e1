"""
Generate SCRAM-SHA-256 password verifiers.

This tool computes SCRAM-SHA-256 secrets (RFC 5802, RFC 7677) in the exact
format used by PostgreSQL and PgBouncer. Output value can be safely placed into
PostgreSQL's `pg_authid` catalog (via `ALTER USER ... PASSWORD`) or into
PgBouncer's `userlist.txt`.
"""

__prog__ = "scram-sha-256"
__version__ = "1.1.0"
__status__ = "Release"
__author__ = "Alexander Pozlevich"
__email__ = "apozlevich@gmail.com"

from .errors import (
    EmptyPasswordError,
    InvalidEncodingError,
    InvalidIterationCountError,
    MalformedVerifierError,
    PasswordMismatchError,
    RandomSourceError,
    ScramError,
)
from .verifier import (
    ITERATIONS,
    KEY_LENGTH,
    MAX_ITERATIONS,
    SALT_LENGTH,
    SCHEME,
    ScramVerifier,
    derive_verifier,
    generate_salt,
    parse_verifier,
    scram_sha256,
    verify_scram_sha256,
)

__all__ = [
    "ITERATIONS",
    "KEY_LENGTH",
    "MAX_ITERATIONS",
    "SALT_LENGTH",
    "SCHEME",
    "EmptyPasswordError",
    "InvalidEncodingError",
    "InvalidIterationCountError",
    "MalformedVerifierError",
    "PasswordMismatchError",
    "RandomSourceError",
    "ScramError",
    "ScramVerifier",
    "derive_verifier",
    "generate_salt",
    "parse_verifier",
    "scram_sha256",
    "verify_scram_sha256",
]
