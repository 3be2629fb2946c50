"""
Keytab materialization for Kerberos authentication.

Turns either inline base64 keytab content or a keytab file path into a
readable binary stream. Inline content always wins over the path.
"""

import base64
import io
import os
import stat
from pathlib import Path
from typing import BinaryIO

from ..constants import BASE64_WHITESPACE, KEYTAB_FORMAT_BYTE
from ..utils.errors import KeytabDecodeError, KeytabError, KeytabNotFoundError
from ..utils.logger import logger
from .types import KeytabSource

_WHITESPACE_TABLE = str.maketrans("", "", BASE64_WHITESPACE)


def compact_base64_whitespace(text: str) -> str:
    """Remove every space, tab, newline, CR, VT and FF, wherever it occurs."""
    return text.translate(_WHITESPACE_TABLE)


def _strict_b64decode(text: str) -> bytes:
    # Standard alphabet, padding required, no characters outside the alphabet
    return base64.b64decode(text, validate=True)


def _unwrap_double_encoding(decoded: bytes) -> bytes:
    """Return the inner payload when ``decoded`` is itself a base64-encoded keytab."""
    if not decoded or decoded[0] == KEYTAB_FORMAT_BYTE:
        return decoded

    try:
        inner = _strict_b64decode(compact_base64_whitespace(decoded.decode("ascii")))
    except ValueError:
        return decoded

    if inner and inner[0] == KEYTAB_FORMAT_BYTE:
        logger.debug("Inline keytab content was base64-encoded twice")
        return inner

    return decoded


def decode_keytab_content(keytab_content: str) -> bytes:
    """
    Decode base64-encoded keytab content.

    Args:
        keytab_content: Base64 text, possibly wrapped with line breaks

    Returns:
        Decoded keytab bytes

    Raises:
        KeytabDecodeError: If the text is not valid padded base64. The
            message embeds the decoder's own reason.
    """
    clean = compact_base64_whitespace(keytab_content)
    try:
        decoded = _strict_b64decode(clean)
    except ValueError as e:
        raise KeytabDecodeError(e) from e

    return _unwrap_double_encoding(decoded)


def select_keytab_source(path: str, base64_text: str) -> KeytabSource:
    """Choose between inline content and path. Non-empty base64 text wins."""
    if base64_text != "":
        return KeytabSource(kind="base64", value=base64_text)
    return KeytabSource(kind="path", value=path)


def open_keytab_file(path: str) -> BinaryIO:
    """
    Open a keytab file for reading.

    Raises:
        KeytabError: If ``path`` is empty
        KeytabNotFoundError: If the file cannot be opened
    """
    if path == "":
        raise KeytabError("keytab_path is empty")

    try:
        keytab_file = open(path, "rb")
    except OSError as e:
        raise KeytabNotFoundError(path, e) from e

    try:
        mode = os.fstat(keytab_file.fileno()).st_mode
    except OSError as e:
        keytab_file.close()
        raise KeytabNotFoundError(path, e) from e

    if mode & stat.S_IROTH:
        logger.warning(f"Keytab file {path} is world-readable. Consider restricting permissions.")

    return keytab_file


def materialize(path: str, base64_text: str) -> BinaryIO:
    """
    Produce a readable keytab stream.

    The caller owns the returned stream and must close it.

    Args:
        path: Keytab file path, ignored when ``base64_text`` is non-empty
        base64_text: Inline base64 keytab content

    Returns:
        Binary stream positioned at the start of the keytab

    Raises:
        KeytabDecodeError: If inline content is malformed
        KeytabError: If no inline content is given and ``path`` is empty
        KeytabNotFoundError: If the keytab file cannot be opened
    """
    source = select_keytab_source(path, base64_text)

    if source.kind == "base64":
        logger.debug("Loading keytab from inline base64 content")
        return io.BytesIO(decode_keytab_content(source.value))

    logger.debug("Loading keytab from file", {"path": source.value})
    return open_keytab_file(source.value)


def write_keytab_file(keytab_bytes: bytes, keytab_path: Path) -> Path:
    """
    Write keytab bytes to a file readable only by the owner.

    Raises:
        KeytabError: If writing fails
    """
    try:
        keytab_path.parent.mkdir(parents=True, exist_ok=True)
        keytab_path.write_bytes(keytab_bytes)
        keytab_path.chmod(stat.S_IRUSR | stat.S_IWUSR)
        return keytab_path

    except OSError as e:
        raise KeytabError(f"Failed to write keytab file {keytab_path}: {e}", e) from e
