"""Tests for the users example."""

from trellis.testing import TestClient

ANN = {"name": "ann1", "password": "Password123"}
BOB = {"name": "bob1", "password": "Password456"}


class TestUsersApp:
    """Drive the users example through the ASGI pipeline."""

    async def test_index_is_raw_html(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text.startswith("<input id=uname")

    async def test_increment(self, example_app) -> None:
        async with TestClient(example_app) as client:
            first = await client.get("/increment")
            second = await client.get("/increment")
        assert first.json() == {"success": True, "data": 0}
        assert second.json() == {"success": True, "data": 1}

    async def test_echo(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/echo", json={"a": [1, 2]})
        assert response.json() == {"success": True, "data": {"a": [1, 2]}}

    async def test_create_user(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/user/create", json=ANN)
        assert response.json() == {"success": True, "data": {"name": "ann1"}}

    async def test_create_requires_name(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/user/create", json={"password": "Password123"})
        assert response.status == 400
        assert response.json() == [{"msg": "field missing", "data": {"field": "name"}}]

    async def test_create_rejects_weak_password(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/user/create", json={"name": "ann1", "password": "password1"})
        assert response.status == 400
        assert response.json()[0]["msg"] == "password missing uppercase"

    async def test_password_type_checked(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/user/create", json={"name": "ann1", "password": 5})
        assert response.json() == [
            {"msg": "field bad type", "data": {"field": "password", "type": "string"}},
        ]

    async def test_duplicate_user(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/user/create", json=ANN)
            response = await client.post("/user/create", json=ANN)
        assert response.json()[0]["msg"] == "user name already exists"

    async def test_like_and_inspect(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/user/create", json=ANN)
            await client.post("/user/create", json=BOB)
            liked = await client.post("/user/like", json={**ANN, "target_name": "bob1"})
            again = await client.post("/user/like", json={**ANN, "target_name": "bob1"})
            inspected = await client.get("/inspect/bob1")
        assert liked.json()["data"] == {"target_user_likes": 1}
        assert again.json()[0]["msg"] == "target user already liked"
        assert inspected.json()["data"] == {"name": "bob1", "liked": [], "liked_by": ["ann1"]}

    async def test_wrong_password(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/user/create", json=ANN)
            response = await client.post(
                "/user/like", json={"name": "ann1", "password": "Wrong1234", "target_name": "bob1"}
            )
        assert response.json() == [{"msg": "invalid user credentials", "data": {}}]

    async def test_delete(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/user/create", json=ANN)
            await client.post("/user/create", json=BOB)
            await client.post("/user/like", json={**ANN, "target_name": "bob1"})
            deleted = await client.post("/user/delete", json=ANN)
            inspected = await client.get("/inspect/bob1")
            gone = await client.get("/inspect/ann1")
        assert deleted.json() == {"success": True, "data": True}
        assert inspected.json()["data"]["liked_by"] == []
        assert gone.json() == [{"msg": "invalid target user name", "data": {}}]
