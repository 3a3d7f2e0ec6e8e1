"""Password suppliers: masked terminal prompt and line-oriented stream reader."""

from getpass import getpass
from typing import BinaryIO

from .errors import InvalidEncodingError, PasswordMismatchError


def read_password_line(stream: BinaryIO) -> bytes:
    """
    Read one password line from a binary stream.

    Only trailing CR and LF characters are removed, so a newline added by
    `echo` or a CRLF terminated file never becomes part of the password.
    End of stream terminates the line as well; an empty stream yields an
    empty password.

    Args:
        stream (BinaryIO):
            Stream to read from, e.g. `sys.stdin.buffer`.

    Returns:
        bytes: Raw password bytes, not yet checked for UTF-8 validity.
    """

    return stream.readline().rstrip(b"\r\n")


def prompt_password(prompt: str = "Password: ", confirm: bool = False) -> str:
    """
    Ask for a password on the controlling terminal without echoing it.

    Raises:
        PasswordMismatchError: If `confirm` is set and both entries differ.
        InvalidEncodingError: If terminal input cannot be decoded.
        EOFError: If input ends before a password is entered.
    """

    try:
        password = getpass(prompt)

        if confirm and getpass("Confirm password: ") != password:
            raise PasswordMismatchError("Passwords do not match.")

    except UnicodeDecodeError as e:
        raise InvalidEncodingError("Password must be valid UTF-8.") from e

    return password
