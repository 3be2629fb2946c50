"""Tests for keytab materialization."""

import base64
import binascii
import io
from unittest.mock import patch

import pytest

from ipa_connect.config import keytab as keytab_module
from ipa_connect.config.keytab import (
    compact_base64_whitespace,
    decode_keytab_content,
    materialize,
    select_keytab_source,
    write_keytab_file,
)
from ipa_connect.utils.errors import KeytabDecodeError, KeytabError, KeytabNotFoundError


class TestCompactBase64Whitespace:
    """Tests for whitespace stripping."""

    def test_no_whitespace_unchanged(self):
        assert compact_base64_whitespace("BQIAAABH") == "BQIAAABH"

    def test_strips_every_whitespace_kind_anywhere(self):
        assert compact_base64_whitespace(" BQ\tIA\r\nAA\vBH\f ") == "BQIAAABH"


class TestDecodeKeytabContent:
    """Tests for decode_keytab_content function."""

    @pytest.mark.parametrize("text", ["BQIAAABH", "BQIA\nAABH", "BQIA AABH", "BQ\r\nIA\tAA\vBH\f"])
    def test_whitespace_insensitive(self, text, keytab_bytes):
        assert decode_keytab_content(text) == keytab_bytes

    def test_line_wrapped_binary_data(self):
        original = bytes(range(256))
        encoded = base64.encodebytes(original).decode("ascii")  # wraps at 76 chars

        assert "\n" in encoded.strip()
        assert decode_keytab_content(encoded) == original

    def test_illegal_character(self):
        with pytest.raises(KeytabDecodeError) as exc_info:
            decode_keytab_content("BQIA!!!!")

        error = exc_info.value
        assert isinstance(error.original_error, binascii.Error)
        assert str(error.original_error) in str(error)
        assert "decode keytab_base64" in str(error)
        assert error.__cause__ is error.original_error

    def test_incorrect_length(self):
        with pytest.raises(KeytabDecodeError) as exc_info:
            decode_keytab_content("BQIAAAB")

        assert str(exc_info.value.original_error) in str(exc_info.value)

    def test_failure_reasons_are_distinguishable(self):
        with pytest.raises(KeytabDecodeError) as illegal:
            decode_keytab_content("!!!!")
        with pytest.raises(KeytabDecodeError) as length:
            decode_keytab_content("BQIAAAB")

        assert str(illegal.value) != str(length.value)

    def test_non_ascii_text(self):
        with pytest.raises(KeytabDecodeError):
            decode_keytab_content("BQIAAABHé")

    def test_double_encoded_keytab(self, keytab_bytes):
        inner = base64.b64encode(keytab_bytes)
        outer = base64.b64encode(inner).decode("ascii")

        assert decode_keytab_content(outer) == keytab_bytes

    def test_non_keytab_payload_returned_as_is(self):
        original = b"test keytab content"
        encoded = base64.b64encode(original).decode("ascii")

        assert decode_keytab_content(encoded) == original


class TestSelectKeytabSource:
    """Tests for source precedence."""

    def test_base64_wins(self):
        source = select_keytab_source("/etc/krb5.keytab", "BQIAAABH")
        assert source.kind == "base64"
        assert source.value == "BQIAAABH"

    def test_path_when_base64_empty(self):
        source = select_keytab_source("/etc/krb5.keytab", "")
        assert source.kind == "path"
        assert source.value == "/etc/krb5.keytab"

    def test_value_hidden_from_repr(self):
        assert "BQIAAABH" not in repr(select_keytab_source("", "BQIAAABH"))


class TestMaterialize:
    """Tests for materialize function."""

    def test_base64_stream(self, keytab_b64, keytab_bytes):
        with materialize("", keytab_b64) as stream:
            assert stream.read() == keytab_bytes

    def test_base64_used_and_path_never_opened(self, tmp_path, keytab_b64, keytab_bytes):
        missing = tmp_path / "missing.keytab"

        with patch.object(keytab_module, "open_keytab_file") as open_file:
            stream = materialize(str(missing), keytab_b64)

        open_file.assert_not_called()
        assert stream.read() == keytab_bytes

    def test_path_stream(self, keytab_file, keytab_bytes):
        stream = materialize(str(keytab_file), "")
        try:
            assert not stream.closed
            assert stream.read() == keytab_bytes
        finally:
            stream.close()

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "missing.keytab"

        with pytest.raises(KeytabNotFoundError) as exc_info:
            materialize(str(missing), "")

        assert isinstance(exc_info.value.original_error, FileNotFoundError)
        assert exc_info.value.path == str(missing)
        assert "No such file or directory" in str(exc_info.value)

    def test_directory_path(self, tmp_path):
        with pytest.raises(KeytabNotFoundError):
            materialize(str(tmp_path), "")

    def test_empty_path_is_distinct_error(self):
        with pytest.raises(KeytabError) as exc_info:
            materialize("", "")

        assert not isinstance(exc_info.value, KeytabNotFoundError)
        assert "keytab_path is empty" in str(exc_info.value)

    def test_invalid_base64(self):
        with pytest.raises(KeytabDecodeError) as exc_info:
            materialize("/etc/krb5.keytab", "!!!!")

        assert str(exc_info.value.original_error) in str(exc_info.value)

    def test_world_readable_warning(self, keytab_file):
        keytab_file.chmod(0o644)

        with patch.object(keytab_module.logger, "warning") as warning:
            materialize(str(keytab_file), "").close()

        warning.assert_called_once()
        assert "world-readable" in warning.call_args[0][0]

    def test_private_keytab_no_warning(self, keytab_file):
        with patch.object(keytab_module.logger, "warning") as warning:
            materialize(str(keytab_file), "").close()

        warning.assert_not_called()

    def test_file_closed_when_stat_fails(self, keytab_file, monkeypatch):
        opened: list[io.BufferedReader] = []

        def tracking_open(path, mode="r"):
            handle = open(path, mode)
            opened.append(handle)
            return handle

        def failing_fstat(fd):
            raise OSError("stat failed")

        monkeypatch.setattr(keytab_module, "open", tracking_open, raising=False)
        monkeypatch.setattr(keytab_module.os, "fstat", failing_fstat)

        with pytest.raises(KeytabNotFoundError) as exc_info:
            materialize(str(keytab_file), "")

        assert "stat failed" in str(exc_info.value)
        assert len(opened) == 1
        assert opened[0].closed


class TestWriteKeytabFile:
    """Tests for write_keytab_file function."""

    def test_written_owner_only(self, tmp_path, keytab_bytes):
        result = write_keytab_file(keytab_bytes, tmp_path / "nested" / "client.keytab")

        assert result.read_bytes() == keytab_bytes
        assert result.stat().st_mode & 0o777 == 0o600

    def test_overwrites_existing_file(self, tmp_path):
        path = tmp_path / "client.keytab"
        path.write_bytes(b"old content")

        write_keytab_file(b"new content", path)

        assert path.read_bytes() == b"new content"
