"""
SCRAM-SHA-256 verifier derivation.

Implements the secret derivation from RFC 5802 and RFC 7677 together with the
storage format understood by PostgreSQL and PgBouncer:

    SCRAM-SHA-256$<iterations>:<salt>$<StoredKey>:<ServerKey>
"""

import hmac
from base64 import b64decode, b64encode
from hashlib import pbkdf2_hmac, sha256
from os import urandom
from typing import NamedTuple

from .errors import (
    EmptyPasswordError,
    InvalidEncodingError,
    InvalidIterationCountError,
    MalformedVerifierError,
    RandomSourceError,
)

SCHEME = "SCRAM-SHA-256"
ITERATIONS = 4096
SALT_LENGTH = 16
KEY_LENGTH = 32
MAX_ITERATIONS = 2**31 - 1


class ScramVerifier(NamedTuple):
    """Decoded fields of a SCRAM-SHA-256 verifier."""

    iterations: int
    salt: bytes
    stored_key: bytes
    server_key: bytes

    def encode(self) -> str:
        """Format fields as a verifier string."""

        salt_b64 = b64encode(self.salt).decode(encoding="ascii")
        stored_b64 = b64encode(self.stored_key).decode(encoding="ascii")
        server_b64 = b64encode(self.server_key).decode(encoding="ascii")

        return f"{SCHEME}${self.iterations}:{salt_b64}${stored_b64}:{server_b64}"


def generate_salt(length: int = SALT_LENGTH) -> bytes:
    """Read salt bytes from the operating system CSPRNG."""

    try:
        return urandom(length)

    except (OSError, NotImplementedError) as e:
        msg = f"Unable to read {length} bytes from system random source: {e}"
        raise RandomSourceError(msg) from e


def validate_password(password: bytes | str) -> bytes:
    """
    Check password and return its UTF-8 representation.

    Args:
        password (bytes | str):
            Raw password. Bytes must already be UTF-8 encoded.

    Returns:
        bytes: UTF-8 encoded password.

    Raises:
        EmptyPasswordError: If password is empty.
        InvalidEncodingError: If password is not valid UTF-8.
    """

    if not password:
        raise EmptyPasswordError("Password cannot be empty.")

    if isinstance(password, str):
        try:
            return password.encode("utf-8")

        except UnicodeEncodeError as e:
            raise InvalidEncodingError("Password must be valid UTF-8.") from e

    try:
        password.decode("utf-8")

    except UnicodeDecodeError as e:
        raise InvalidEncodingError("Password must be valid UTF-8.") from e

    return bytes(password)


def validate_iterations(iterations: int) -> int:
    """Ensure PBKDF2 iterations count is a positive integer PBKDF2 can handle."""

    if (
        not isinstance(iterations, int)  # pyright: ignore[reportUnnecessaryIsInstance]
        or isinstance(iterations, bool)
        or iterations < 1
    ):
        msg = f"PBKDF2 iterations count must be positive integer, got {iterations!r}"
        raise InvalidIterationCountError(msg)

    if iterations > MAX_ITERATIONS:
        msg = f"PBKDF2 iterations count must not exceed {MAX_ITERATIONS}, got {iterations}"
        raise InvalidIterationCountError(msg)

    return iterations


def derive_verifier(password: bytes, salt: bytes, iterations: int) -> ScramVerifier:
    """
    Derive StoredKey and ServerKey for already validated input.

    Deterministic for a given `(password, salt, iterations)` triple; all
    randomness comes from the caller-supplied salt.

    Args:
        password (bytes):
            UTF-8 encoded user password.

        salt (bytes):
            Salt used for PBKDF2.

        iterations (int):
            PBKDF2 iteration count.

    Returns:
        ScramVerifier: Iterations, salt, StoredKey and ServerKey.
    """

    salted = pbkdf2_hmac("sha256", password, salt, iterations, dklen=KEY_LENGTH)
    client_key = hmac.new(salted, b"Client Key", sha256).digest()
    stored_key = sha256(client_key).digest()
    server_key = hmac.new(salted, b"Server Key", sha256).digest()

    return ScramVerifier(iterations, salt, stored_key, server_key)


def scram_sha256(password: bytes | str, iterations: int = ITERATIONS) -> str:
    """
    Compute a SCRAM-SHA-256 verifier string.

    Arguments are validated before any cryptographic work is done. A fresh
    16-byte salt is drawn for every call, so repeated calls with the same
    password yield different verifiers.

    Args:
        password (bytes | str):
            User password. Bytes must be UTF-8 encoded.

        iterations (int):
            PBKDF2 iteration count (default recommended by PostgreSQL is 4096).

    Returns:
        str: A SCRAM-SHA-256 verifier formatted as:
        `SCRAM-SHA-256$<iterations>:<salt_b64>$<stored_key_b64>:<server_key_b64>`

    Raises:
        EmptyPasswordError: If password is empty.
        InvalidEncodingError: If password is not valid UTF-8.
        InvalidIterationCountError: If iterations is below 1 or above 2**31-1.
        RandomSourceError: If the system random source fails.
    """

    pwd_bytes = validate_password(password)
    iterations = validate_iterations(iterations)

    return derive_verifier(pwd_bytes, generate_salt(), iterations).encode()


def _decode_field(value: str, length: int, name: str) -> bytes:
    """Decode a BASE64 verifier field and check its length."""

    try:
        decoded = b64decode(value, validate=True)

    except ValueError as e:
        raise MalformedVerifierError(f"{name} in SCRAM verifier is not valid BASE64.") from e

    if len(decoded) != length:
        msg = f"{name} in SCRAM verifier must be {length} bytes"
        raise MalformedVerifierError(msg)

    return decoded


def parse_verifier(verifier: str) -> ScramVerifier:
    """
    Parse a SCRAM-SHA-256 verifier string.

    Args:
        verifier (str):
            Verifier in PostgreSQL format. Surrounding whitespace is ignored.

    Returns:
        ScramVerifier: Decoded verifier fields.

    Raises:
        MalformedVerifierError:
            If the verifier is malformed or uses an unsupported scheme.
    """

    try:
        scheme, body = verifier.strip().split("$", 1)

    except ValueError:
        raise MalformedVerifierError("Invalid SCRAM verifier format.") from None

    if scheme != SCHEME:
        raise MalformedVerifierError("Unsupported SCRAM scheme (expected SCRAM-SHA-256).")

    try:
        iter_part, keys_part = body.split("$")
        iterations_str, salt_b64 = iter_part.split(":")
        stored_b64, server_b64 = keys_part.split(":")

    except ValueError:
        raise MalformedVerifierError("Malformed SCRAM verifier structure.") from None

    if (
        not iterations_str.isascii()
        or not iterations_str.isdigit()
        or iterations_str.startswith("0")
    ):
        msg = f"Invalid iterations count in SCRAM verifier: {iterations_str!r}"
        raise MalformedVerifierError(msg)

    iterations = int(iterations_str)

    if iterations > MAX_ITERATIONS:
        msg = f"Iterations count in SCRAM verifier exceeds {MAX_ITERATIONS}: {iterations}"
        raise MalformedVerifierError(msg)

    return ScramVerifier(
        iterations=iterations,
        salt=_decode_field(salt_b64, SALT_LENGTH, "Salt"),
        stored_key=_decode_field(stored_b64, KEY_LENGTH, "StoredKey"),
        server_key=_decode_field(server_b64, KEY_LENGTH, "ServerKey"),
    )


def verify_scram_sha256(password: bytes | str, verifier: str) -> bool:
    """
    Verify a plaintext password against a SCRAM-SHA-256 verifier string.

    Both StoredKey and ServerKey are re-derived from the verifier's salt and
    iteration count and compared in constant time.

    Args:
        password (bytes | str):
            Plaintext password to verify. Strings are encoded using UTF-8
            before PBKDF2 derivation, matching PostgreSQL behavior.

        verifier (str):
            A SCRAM-SHA-256 verifier string in PostgreSQL format.

    Returns:
        bool:
            True if the password matches the SCRAM verifier. False otherwise.

    Raises:
        MalformedVerifierError: If the verifier cannot be parsed.
        EmptyPasswordError: If password is empty.
        InvalidEncodingError: If password is not valid UTF-8.
    """

    expected = parse_verifier(verifier)
    actual = derive_verifier(validate_password(password), expected.salt, expected.iterations)

    stored_ok = hmac.compare_digest(actual.stored_key, expected.stored_key)
    server_ok = hmac.compare_digest(actual.server_key, expected.server_key)

    return stored_ok and server_ok
