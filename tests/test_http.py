"""Tests for trellis.http: Headers, Request, Response, Reply."""

import pytest

from trellis.http import Headers, Reply, Request, Response


def make_request(body: bytes = b"", *, query: bytes = b"", chunks: list[bytes] | None = None) -> Request:
    messages = [
        {"type": "http.request", "body": part, "more_body": i < len(chunks) - 1}
        for i, part in enumerate(chunks)
    ] if chunks else [{"type": "http.request", "body": body, "more_body": False}]

    async def receive():
        return messages.pop(0)

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/echo",
        "query_string": query,
        "headers": [(b"content-type", b"application/json"), (b"x-tag", b"a"), (b"X-Tag", b"b")],
        "client": ("127.0.0.1", 5000),
    }
    return Request.from_asgi(scope, receive)


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/plain"),))
        assert headers["content-type"] == "text/plain"
        assert headers.get("CONTENT-TYPE") == "text/plain"

    def test_repeated(self) -> None:
        headers = make_request().headers
        assert headers["x-tag"] == "a"
        assert headers.get_list("x-tag") == ["a", "b"]
        assert len(headers) == 2
        assert headers.raw[0] == (b"content-type", b"application/json")

    def test_missing(self) -> None:
        with pytest.raises(KeyError):
            Headers()["x"]


class TestRequest:
    def test_metadata(self) -> None:
        request = make_request(query=b"page=2&sort=name")
        assert request.method == "POST"
        assert request.content_type == "application/json"
        assert request.query == {"page": "2", "sort": "name"}
        assert request.client == ("127.0.0.1", 5000)

    async def test_body_is_cached(self) -> None:
        request = make_request(b'{"a": 1}')
        assert await request.body() == b'{"a": 1}'
        assert await request.body() == b'{"a": 1}'

    async def test_chunked_body(self) -> None:
        request = make_request(chunks=[b"ab", b"cd"])
        assert await request.body() == b"abcd"

    def test_parsed_body_defaults_to_empty(self) -> None:
        assert make_request().parsed_body == {}

    def test_with_path_params_shares_parsed_body(self) -> None:
        request = make_request()
        request.set_parsed_body({"name": "ann"})
        routed = request.with_path_params({"id": "7"})
        assert routed.path_params == {"id": "7"}
        assert routed.parsed_body == {"name": "ann"}
        assert request.path_params == {}


class TestResponse:
    def test_chaining(self) -> None:
        response = (
            Response("hi")
            .with_status(201)
            .with_header("X-A", "1")
            .with_headers({"X-B": "2"})
        )
        assert response.status == 201
        assert response.headers == (("X-A", "1"), ("X-B", "2"))
        assert response.body_bytes == b"hi"

    def test_from_json(self) -> None:
        response = Response.from_json({"ok": True}, status=202)
        assert response.status == 202
        assert response.json() == {"ok": True}
        assert response.text == '{"ok": true}'


class TestReply:
    def test_empty_reply_is_identity(self) -> None:
        response = Response("x")
        assert Reply().apply(response) is response

    def test_status_only_overrides_success(self) -> None:
        reply = Reply(status=201)
        assert reply.apply(Response("x")).status == 201
        assert reply.apply(Response("x", status=400)).status == 400

    def test_headers_appended(self) -> None:
        reply = Reply()
        reply.set_header("X-Trace", "abc")
        assert reply.apply(Response("x", status=500)).headers == (("X-Trace", "abc"),)
