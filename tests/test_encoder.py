"""Tests for restwire.encoder.

Tests cover:
- URL encoding of parameters (order, duplicates, reserved characters)
- Multipart layout, boundary markers and the filename-as-field-name quirk
- Precedence: files > parameters > raw body
- Deterministic output for a fixed boundary
"""

from urllib.parse import quote_plus

import pytest
from hypothesis import given
from hypothesis import strategies as st

from restwire.encoder import (
    DEFAULT_BOUNDARY,
    DEFAULT_FILE_CONTENT_TYPE,
    FORM_URLENCODED,
    RAW_BODY_CONTENT_TYPE,
    append_query,
    encode_body,
    encode_multipart,
    encode_parameters,
    encode_raw_body,
    multipart_content_type,
    random_boundary,
)
from restwire.models import HttpParameter, HttpRequest
from tests.conftest import TEST_BOUNDARY, attachment, param

_names = st.text(min_size=1, max_size=12)
_values = st.text(max_size=20)
_param_lists = st.lists(
    st.builds(HttpParameter, name=_names, value=_values), min_size=1, max_size=8
)


# =============================================================================
# URL Encoding
# =============================================================================


class TestEncodeParameters:
    def test_single_pair(self):
        assert encode_parameters([param("q", "widgets")]) == "q=widgets"

    def test_space_encoded_as_plus(self):
        assert encode_parameters([param("q", "hello world")]) == "q=hello+world"

    def test_names_are_encoded_too(self):
        assert encode_parameters([param("a b&c", "1")]) == "a+b%26c=1"

    def test_reserved_characters_encoded(self):
        assert encode_parameters([param("x", "a=b&c/d?")]) == "x=a%3Db%26c%2Fd%3F"

    def test_unicode_encoded_as_utf8(self):
        assert encode_parameters([param("name", "héllo")]) == "name=h%C3%A9llo"

    def test_duplicates_preserved(self):
        params = [param("id", "1"), param("id", "2")]
        assert encode_parameters(params) == "id=1&id=2"

    def test_empty_value(self):
        assert encode_parameters([param("flag", "")]) == "flag="

    def test_empty_sequence(self):
        assert encode_parameters([]) == ""

    @given(_param_lists)
    def test_one_pair_per_parameter_in_insertion_order(self, params):
        encoded = encode_parameters(params)
        pairs = encoded.split("&")
        assert len(pairs) == len(params)
        for pair, p in zip(pairs, params):
            assert pair == f"{quote_plus(p.name)}={quote_plus(p.value)}"


class TestAppendQuery:
    def test_adds_question_mark(self):
        assert append_query("http://x/api", [param("q", "hello world")]) == "http://x/api?q=hello+world"

    def test_extends_existing_query(self):
        assert append_query("http://x/api?a=1", [param("b", "2")]) == "http://x/api?a=1&b=2"

    def test_no_parameters_leaves_url(self):
        assert append_query("http://x/api", []) == "http://x/api"


# =============================================================================
# Multipart
# =============================================================================


class TestEncodeMultipart:
    def test_file_part_layout(self):
        body = encode_multipart([attachment("a.txt", b"hi")], [], "B")
        assert body == (
            b"--B\r\n"
            b'Content-Disposition: form-data; name="a.txt"; filename="a.txt"\r\n'
            b"Content-Type: application/octet-stream\r\n"
            b"\r\n"
            b"hi\r\n"
            b"--B--\r\n"
        )

    def test_filename_used_as_field_name(self):
        """The caller's field name is not written; the filename is used twice."""
        body = encode_multipart([attachment("a.txt", name="f")], [], "B")
        assert b'name="a.txt"; filename="a.txt"' in body
        assert b'name="f"' not in body

    def test_file_content_type_used_when_set(self):
        body = encode_multipart([attachment("a.csv", b"1,2", content_type="text/csv")], [], "B")
        assert b"Content-Type: text/csv\r\n" in body

    def test_default_content_type(self):
        body = encode_multipart([attachment()], [], "B")
        assert f"Content-Type: {DEFAULT_FILE_CONTENT_TYPE}".encode() in body

    def test_parameter_part_layout(self):
        body = encode_multipart([attachment()], [param("title", "Report")], "B")
        assert body.endswith(
            b"--B\r\n"
            b'Content-Disposition: form-data; name="title"\r\n'
            b"\r\n"
            b"Report\r\n"
            b"--B--\r\n"
        )

    def test_files_written_before_parameters(self):
        body = encode_multipart([attachment("a.txt")], [param("title", "x")], "B")
        assert body.index(b'filename="a.txt"') < body.index(b'name="title"')

    def test_binary_data_copied_verbatim(self):
        data = bytes(range(256))
        body = encode_multipart([attachment("blob.bin", data)], [], "B")
        assert data in body

    def test_file_data_not_mutated(self):
        file = attachment("a.txt", b"payload")
        encode_multipart([file], [], "B")
        assert file.data == b"payload"

    @pytest.mark.parametrize("n_files,n_params", [(1, 0), (2, 0), (1, 3), (3, 2)])
    def test_boundary_marker_counts(self, n_files, n_params):
        files = [attachment(f"f{i}.txt", b"x") for i in range(n_files)]
        params = [param(f"p{i}", "v") for i in range(n_params)]
        body = encode_multipart(files, params, TEST_BOUNDARY)

        opening = f"--{TEST_BOUNDARY}\r\n".encode()
        closing = f"--{TEST_BOUNDARY}--".encode()
        assert body.count(opening) == n_files + n_params
        assert body.count(closing) == 1
        assert body.endswith(closing + b"\r\n")


class TestBoundary:
    def test_content_type_carries_boundary(self):
        assert multipart_content_type("B") == "multipart/form-data; boundary=B"

    def test_random_boundary_differs_per_call(self):
        assert random_boundary() != random_boundary()

    def test_random_boundary_within_rfc_length(self):
        assert 0 < len(random_boundary()) <= 70


# =============================================================================
# Raw Body
# =============================================================================


class TestEncodeRawBody:
    def test_ascii_passthrough(self):
        assert encode_raw_body("<a>1</a>") == b"<a>1</a>"

    def test_non_ascii_replaced(self):
        assert encode_raw_body("café") == b"caf?"


# =============================================================================
# encode_body precedence
# =============================================================================


class TestEncodeBody:
    def test_nothing_to_send(self):
        assert encode_body(HttpRequest(url="http://x/")) is None

    def test_parameters_form_encoded(self):
        request = HttpRequest(url="http://x/", parameters=[param("a", "1"), param("b", "x y")])
        encoded = encode_body(request)
        assert encoded.content == b"a=1&b=x+y"
        assert encoded.content_type == FORM_URLENCODED

    def test_raw_body_is_text_xml(self):
        encoded = encode_body(HttpRequest(url="http://x/", body="<a/>"))
        assert encoded.content == b"<a/>"
        assert encoded.content_type == RAW_BODY_CONTENT_TYPE

    def test_empty_raw_body_sends_nothing(self):
        assert encode_body(HttpRequest(url="http://x/", body="")) is None

    def test_parameters_take_precedence_over_raw_body(self):
        request = HttpRequest(url="http://x/", parameters=[param("a", "1")], body="RAW")
        encoded = encode_body(request)
        assert encoded.content == b"a=1"
        assert encoded.content_type == FORM_URLENCODED

    def test_files_take_precedence_over_raw_body(self):
        request = HttpRequest(url="http://x/", files=[attachment()], body="RAW-BODY-MARKER")
        encoded = encode_body(request, TEST_BOUNDARY)
        assert encoded.content_type == f"multipart/form-data; boundary={TEST_BOUNDARY}"
        assert b"RAW-BODY-MARKER" not in encoded.content

    def test_files_switch_parameters_to_multipart(self):
        request = HttpRequest(url="http://x/", files=[attachment()], parameters=[param("a", "1")])
        encoded = encode_body(request, TEST_BOUNDARY)
        assert b'Content-Disposition: form-data; name="a"\r\n\r\n1\r\n' in encoded.content
        assert b"a=1" not in encoded.content

    def test_default_boundary(self):
        encoded = encode_body(HttpRequest(url="http://x/", files=[attachment()]))
        assert encoded.content_type.endswith(f"boundary={DEFAULT_BOUNDARY}")

    def test_same_request_encodes_identically(self):
        request = HttpRequest(
            url="http://x/",
            files=[attachment("a.txt", b"one"), attachment("b.bin", b"\x00\x01")],
            parameters=[param("k", "v"), param("k", "w")],
        )
        assert encode_body(request, TEST_BOUNDARY) == encode_body(request, TEST_BOUNDARY)

    @given(_param_lists)
    def test_parameter_encoding_is_idempotent(self, params):
        request = HttpRequest(url="http://x/", parameters=params)
        assert encode_body(request) == encode_body(request)
