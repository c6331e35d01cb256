"""
Unit tests for HTTP request parsing.
"""

import socket

import pytest

from basichttp.http.methods import HTTPMethod
from basichttp.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser.parse() on complete in-memory requests."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method is HTTPMethod.GET
        assert request.path == "/api/users?page=1&limit=10"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.body == b""

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed with their received case."""
        request = parse_request(sample_get_request)

        assert request.headers == {
            "Host": "localhost:3000",
            "User-Agent": "pytest",
            "Accept": "application/json",
        }

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with JSON body."""
        request = parse_request(sample_post_request)

        assert request.method is HTTPMethod.POST
        assert request.path == "/api/users"
        assert request.body == b'{"name": "John", "email": "john@example.com"}'
        assert request.content_length == len(request.body)

    @pytest.mark.parametrize("method", list(HTTPMethod))
    def test_every_supported_method(self, method: HTTPMethod):
        raw = f"{method.value} /x HTTP/1.1\r\n\r\n".encode()
        assert parse_request(raw).method is method

    @pytest.mark.parametrize("token", [b"INVALID", b"get", b"CONNECT", b"G3T"])
    def test_parse_invalid_method(self, token: bytes):
        """Test that unknown methods are rejected, never defaulted."""
        raw = token + b" /path HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 405

    def test_parse_missing_path(self):
        """Test handling of a request line without a path."""
        raw = b"GET\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError):
            parse_request(raw)

    @pytest.mark.parametrize("raw", [
        b"\r\n\r\n",
        b"\r\nHost: test\r\n\r\n",
        b"   \r\nHost: test\r\n\r\n",
    ])
    def test_parse_empty_request_line(self, raw: bytes):
        with pytest.raises(HTTPParseError, match="Empty request line"):
            parse_request(raw)

    def test_parse_missing_headers(self):
        """Test parsing request with no headers."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method is HTTPMethod.GET
        assert request.path == "/"
        assert request.headers == {}

    def test_version_is_optional(self):
        request = parse_request(b"GET /\r\n\r\n")
        assert request.version == "HTTP/1.1"

        request = parse_request(b"GET / HTTP/1.0\r\n\r\n")
        assert request.version == "HTTP/1.0"

    def test_header_value_keeps_colons(self):
        request = parse_request(b"GET / HTTP/1.1\r\nHost: localhost:3000\r\n\r\n")
        assert request.headers["Host"] == "localhost:3000"

    def test_duplicate_header_last_wins(self):
        raw = b"GET / HTTP/1.1\r\nX-Test: one\r\nX-Test: two\r\n\r\n"
        assert parse_request(raw).headers == {"X-Test": "two"}

    def test_malformed_header_line_skipped(self):
        raw = b"GET / HTTP/1.1\r\nno-separator-here\r\nX-Ok: yes\r\n\r\n"
        assert parse_request(raw).headers == {"X-Ok": "yes"}

    def test_invalid_utf8_in_headers_replaced(self):
        raw = b"GET / HTTP/1.1\r\nX-Name: caf\xe9\r\n\r\n"
        assert parse_request(raw).headers["X-Name"] == "caf�"

    def test_content_length_handling(self):
        """Test Content-Length validation."""
        body = b"test body"
        raw = (
            b"POST / HTTP/1.1\r\n"
            b"Content-Length: 9\r\n"
            b"\r\n"
        ) + body

        request = parse_request(raw)
        assert request.content_length == 9
        assert request.body == body

    def test_content_length_name_case_insensitive(self):
        raw = b"POST / HTTP/1.1\r\ncontent-length: 3\r\n\r\nabc"
        assert parse_request(raw).body == b"abc"

    @pytest.mark.parametrize("value", [b"abc", b"-1", b"1.5", b"", b"\xd9\xa3"])
    def test_invalid_content_length(self, value: bytes):
        raw = b"POST / HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    def test_body_shorter_than_declared(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nshort"

        with pytest.raises(HTTPParseError, match="Incomplete body"):
            parse_request(raw)

    def test_body_longer_than_declared(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 2\r\n\r\ntoo long"

        with pytest.raises(HTTPParseError):
            parse_request(raw)

    def test_body_too_large(self):
        """Test that oversized bodies are rejected."""
        parser = RequestParser(max_body_size=100)
        raw = b"POST / HTTP/1.1\r\nContent-Length: 101\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(raw)

        assert exc_info.value.status_code == 413

    def test_missing_terminator(self):
        with pytest.raises(HTTPParseError, match="no header terminator"):
            parse_request(b"GET / HTTP/1.1\r\nHost: test\r\n")


class TestRequestParserRead:
    """Tests for RequestParser.read() against a scripted stream."""

    HEAD = b"POST /upload HTTP/1.1\r\nContent-Length: 20\r\n\r\n"

    def test_single_read_request(self, make_stream, sample_get_request: bytes):
        stream = make_stream(sample_get_request)

        request = RequestParser().read(stream, ("10.0.0.1", 5000))

        assert request.path == "/api/users?page=1&limit=10"
        assert request.client_address == ("10.0.0.1", 5000)
        assert stream.sizes == [2048]

    def test_body_completed_with_one_exact_read(self, make_stream):
        stream = make_stream(self.HEAD + b"01234", b"56789abcdefghij")

        request = RequestParser().read(stream)

        assert request.body == b"0123456789abcdefghij"
        assert len(request.body) == 20
        assert stream.sizes == [2048, 15]

    def test_short_reads_ask_for_the_remaining_deficit(self, make_stream):
        stream = make_stream(self.HEAD + b"01234", b"56789", b"abcdefghij")

        request = RequestParser().read(stream)

        assert request.body == b"0123456789abcdefghij"
        assert stream.sizes == [2048, 15, 10]

    def test_body_entirely_in_later_read(self, make_stream):
        stream = make_stream(self.HEAD, b"0123456789abcdefghij")

        request = RequestParser().read(stream)

        assert request.body == b"0123456789abcdefghij"
        assert stream.sizes == [2048, 20]

    def test_binary_body_keeps_trailing_nul_bytes(self, make_stream):
        head = b"POST / HTTP/1.1\r\nContent-Length: 4\r\n\r\n"
        stream = make_stream(head + b"\x00\x01\x00\x00")

        request = RequestParser().read(stream)

        assert request.body == b"\x00\x01\x00\x00"

    def test_eof_before_body_complete(self, make_stream):
        stream = make_stream(self.HEAD + b"01234", b"567")

        with pytest.raises(HTTPParseError, match="Incomplete body"):
            RequestParser().read(stream)

    def test_more_body_than_declared(self, make_stream):
        head = b"POST / HTTP/1.1\r\nContent-Length: 2\r\n\r\n"
        stream = make_stream(head + b"abcdef")

        with pytest.raises(HTTPParseError):
            RequestParser().read(stream)

    def test_header_block_grows_across_reads(self, make_stream):
        parser = RequestParser(initial_read_size=16, buffer_size=8)
        raw = b"GET /long/path HTTP/1.1\r\nX-Header: value\r\n\r\n"
        stream = make_stream(raw)

        request = parser.read(stream)

        assert request.path == "/long/path"
        assert request.headers == {"X-Header": "value"}
        assert stream.sizes[0] == 16
        assert set(stream.sizes[1:]) == {8}

    def test_header_block_too_large(self, make_stream):
        parser = RequestParser(initial_read_size=64, buffer_size=64, max_header_size=128)
        stream = make_stream(b"GET / HTTP/1.1\r\nX-Large: " + b"A" * 500)

        with pytest.raises(HTTPParseError) as exc_info:
            parser.read(stream)

        assert exc_info.value.status_code == 431

    @pytest.mark.parametrize("first_line,status", [
        (b"\r\n", 400),
        (b"FETCH / HTTP/1.1\r\n", 405),
        (b"GET\r\n", 400),
    ])
    def test_bad_request_line_fails_before_more_reads(self, make_stream, first_line, status):
        """The rest of the header block is never waited for."""
        stream = make_stream(first_line, b"Host: x\r\n\r\n")

        with pytest.raises(HTTPParseError) as exc_info:
            RequestParser().read(stream)

        assert exc_info.value.status_code == status
        assert stream.sizes == [2048]

    def test_good_request_line_keeps_reading_headers(self, make_stream):
        stream = make_stream(b"GET / HTTP/1.1\r\n", b"Host: x\r\n", b"\r\n")

        request = RequestParser().read(stream)

        assert request.headers == {"Host": "x"}
        assert stream.sizes == [2048, 8192, 8192]

    def test_connection_closed_before_anything_sent(self, make_stream):
        with pytest.raises(HTTPParseError, match="closed before request line"):
            RequestParser().read(make_stream())

    def test_eof_without_terminator(self, make_stream):
        stream = make_stream(b"GET / HTTP/1.1\r\nHost: x\r\n")

        with pytest.raises(HTTPParseError, match="no header terminator"):
            RequestParser().read(stream)

    def test_socket_timeout_is_parse_failure(self, make_stream):
        stream = make_stream(socket.timeout("timed out"))

        with pytest.raises(HTTPParseError, match="Failed to read request"):
            RequestParser().read(stream)

    def test_reset_during_body_is_parse_failure(self, make_stream):
        stream = make_stream(self.HEAD, ConnectionResetError("reset by peer"))

        with pytest.raises(HTTPParseError):
            RequestParser().read(stream)


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_default(self):
        """Test get_header with default value."""
        request = HTTPRequest(method=HTTPMethod.GET, path="/")

        assert request.get_header("X-Missing") is None
        assert request.get_header("X-Missing", "default") == "default"

    def test_get_header_case_insensitive(self):
        request = HTTPRequest(
            method=HTTPMethod.GET,
            path="/",
            headers={"CONTENT-TYPE": "text/html"},
        )

        assert request.get_header("Content-Type") == "text/html"
        assert request.get_header("content-type") == "text/html"

    def test_text_is_lossy(self):
        request = HTTPRequest(method=HTTPMethod.POST, path="/", body=b"ok \xff")
        assert request.text == "ok �"

    def test_request_is_immutable(self):
        request = HTTPRequest(method=HTTPMethod.GET, path="/")

        with pytest.raises(AttributeError):
            request.path = "/other"

    def test_headers_are_read_only(self):
        headers = {"X-Test": "1"}
        request = HTTPRequest(method=HTTPMethod.GET, path="/", headers=headers)

        with pytest.raises(TypeError):
            request.headers["X-Test"] = "2"

        headers["X-Test"] = "changed"
        assert request.headers["X-Test"] == "1"
