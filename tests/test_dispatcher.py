"""Tests for trellis.server: the dispatcher, its ASGI handler and JSONBody."""

import pytest

from trellis.http.request import Request
from trellis.http.response import Response
from trellis.middleware import JSONBody
from trellis.server import Dispatcher
from trellis.testing import TestClient


async def echo_body(request: Request) -> Response:
    return Response.from_json({"body": request.parsed_body, "params": request.path_params})


async def hello(request: Request) -> Response:
    return Response("hello")


def make_dispatcher(*routes: tuple[str, str, object]) -> Dispatcher:
    dispatcher = Dispatcher()
    dispatcher.use(JSONBody())
    for method, path, handler in routes:
        dispatcher.register(method, path, handler)
    return dispatcher


class TestDispatcher:
    async def test_register_and_serve(self) -> None:
        client = TestClient(make_dispatcher(("GET", "/hello", hello)))
        response = await client.get("/hello")
        assert response.status == 200
        assert response.text == "hello"

    async def test_path_params(self) -> None:
        client = TestClient(make_dispatcher(("GET", "/users/:id", echo_body)))
        response = await client.get("/users/7")
        assert response.json() == {"body": {}, "params": {"id": "7"}}

    async def test_method_is_uppercased(self) -> None:
        client = TestClient(make_dispatcher(("post", "/x", hello)))
        assert (await client.post("/x")).status == 200

    async def test_not_found(self) -> None:
        response = await TestClient(make_dispatcher(("GET", "/a", hello))).get("/b")
        assert response.status == 404

    async def test_method_not_allowed(self) -> None:
        response = await TestClient(make_dispatcher(("GET", "/a", hello))).delete("/a")
        assert response.status == 405
        assert ("allow", "GET") in response.headers

    async def test_handler_fault_is_500(self) -> None:
        async def broken(request: Request) -> Response:
            raise RuntimeError("boom")

        response = await TestClient(make_dispatcher(("GET", "/a", broken))).get("/a")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_duplicate_first_wins(self) -> None:
        async def second(request: Request) -> Response:
            return Response("second")

        client = TestClient(make_dispatcher(("GET", "/a", hello), ("GET", "/a", second)))
        assert (await client.get("/a")).text == "hello"

    async def test_middleware_order(self) -> None:
        seen: list[str] = []

        def tagging(name: str):
            async def mw(request, next):
                seen.append(name)
                return await next(request)

            return mw

        dispatcher = make_dispatcher(("GET", "/a", hello))
        dispatcher.use(tagging("first"))
        dispatcher.use(tagging("second"))
        await TestClient(dispatcher).get("/a")
        assert seen == ["first", "second"]

    async def test_middleware_can_short_circuit(self) -> None:
        async def gate(request, call_next):
            if request.headers.get("x-key") != "open":
                return Response("denied", status=403)
            return await call_next(request)

        dispatcher = make_dispatcher(("GET", "/a", hello))
        dispatcher.use(gate)
        client = TestClient(dispatcher)
        assert (await client.get("/a")).status == 403
        assert (await client.get("/a", headers={"X-Key": "open"})).text == "hello"

    async def test_frozen_after_first_request(self) -> None:
        dispatcher = make_dispatcher(("GET", "/a", hello))
        await TestClient(dispatcher).get("/a")
        assert dispatcher.frozen
        with pytest.raises(RuntimeError, match="Cannot modify the dispatcher"):
            dispatcher.register("GET", "/b", hello)

    def test_introspection(self) -> None:
        dispatcher = make_dispatcher(("GET", "/a", hello))
        assert [r.path for r in dispatcher.routes] == ["/a"]
        assert len(dispatcher.middleware) == 1
        assert not dispatcher.frozen


class TestJSONBody:
    async def test_parses_json(self) -> None:
        client = TestClient(make_dispatcher(("POST", "/echo", echo_body)))
        response = await client.post("/echo", json={"name": "ann"})
        assert response.json()["body"] == {"name": "ann"}

    async def test_non_json_body_is_empty(self) -> None:
        client = TestClient(make_dispatcher(("POST", "/echo", echo_body)))
        response = await client.post("/echo", body=b"name=ann", headers={"content-type": "text/plain"})
        assert response.json()["body"] == {}

    async def test_malformed_json_is_400(self) -> None:
        client = TestClient(make_dispatcher(("POST", "/echo", echo_body)))
        response = await client.post(
            "/echo", body=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status == 400

    async def test_oversized_body_is_413(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.use(JSONBody(max_size=8))
        dispatcher.register("POST", "/echo", echo_body)
        response = await TestClient(dispatcher).post("/echo", json={"name": "a long name"})
        assert response.status == 413
