"""Users: accounts, likes, and validation through hook chains.

Shows nested route groups sharing before-hooks, hooks that attach state
to the request context, structured validation errors via ``affirm``, and
a raw HTML page.

Run:
    python app.py
"""

import hashlib
import logging
import re

from trellis import App, affirm

logger = logging.getLogger("users")

# -- Storage --

users: list[dict] = []
counter = {"value": 0}


def get_user_by_name(name):
    return next((user for user in users if user["name"] == name), None)


def password_hash(value: str) -> str:
    # Not secure, but obscure enough for a demo
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]


# -- Validation --


def validate_name(name) -> None:
    affirm(isinstance(name, str), "field bad type", {"field": "name", "type": "string"})
    affirm(len(name) < 40, "name too long")
    affirm(len(name) > 3, "name too short")


def validate_password(password) -> None:
    affirm(isinstance(password, str), "field bad type", {"field": "password", "type": "string"})
    affirm(len(password) > 7, "password too short")
    affirm(re.search(r"\d", password), "password missing digit")
    affirm(re.search(r"[A-Z]", password), "password missing uppercase")
    affirm(re.search(r"[a-z]", password), "password missing lowercase")


_TYPE_NAMES = {str: "string", int: "number", bool: "boolean"}


def ensure_has(fields):
    """Hook requiring *fields* in ``ctx.data``.

    *fields* is a name, a list of names, or a mapping of name to type.
    """
    if isinstance(fields, str):
        fields = {fields: None}
    elif isinstance(fields, list):
        fields = dict.fromkeys(fields)

    def check(ctx):
        for field, kind in fields.items():
            affirm(field in ctx.data, "field missing", {"field": field})
            if kind is not None:
                affirm(
                    isinstance(ctx.data[field], kind),
                    "field bad type",
                    {"field": field, "type": _TYPE_NAMES.get(kind, kind.__name__)},
                )

    return check


def auto_hash(field):
    """Hook storing a hash of ``ctx.data[field]`` under ``ctx.hashes``."""

    def hash_field(ctx):
        ensure_has({field: str})(ctx.self)
        if ctx.get("hashes") is None:
            ctx.hashes = {}
        ctx.hashes[field] = password_hash(ctx.data[field])

    return hash_field


def ensure_auth(ctx):
    user = get_user_by_name(ctx.data["name"])
    affirm(user, "invalid user name")
    affirm(user["hash"] == ctx.hashes["password"], "invalid user credentials")
    ctx.user = user


# -- Handlers --


def increment(ctx):
    value = counter["value"]
    counter["value"] += 1
    return value


def echo(ctx):
    return ctx.data


def create_user(ctx):
    validate_name(ctx.data["name"])
    validate_password(ctx.data["password"])
    affirm(get_user_by_name(ctx.data["name"]) is None, "user name already exists")

    user = {"name": ctx.data["name"], "hash": ctx.hashes["password"], "liked": [], "liked_by": []}
    users.append(user)
    return {"name": user["name"]}


def like(ctx):
    validate_name(ctx.data["target_name"])
    target = get_user_by_name(ctx.data["target_name"])
    affirm(target, "invalid target user name")
    affirm(target["name"] not in ctx.user["liked"], "target user already liked")

    target["liked_by"].append(ctx.user["name"])
    ctx.user["liked"].append(target["name"])
    return {"target_user_likes": len(target["liked_by"])}


def delete_user(ctx):
    user = ctx.user
    for other in users:
        if user["name"] in other["liked_by"]:
            other["liked_by"].remove(user["name"])
        if user["name"] in other["liked"]:
            other["liked"].remove(user["name"])
    users.remove(user)
    return True


def inspect_user(ctx):
    user = get_user_by_name(ctx.data["target_name"])
    affirm(user, "invalid target user name")
    return {"name": user["name"], "liked": user["liked"], "liked_by": user["liked_by"]}


def index(ctx):
    return {"raw": INDEX_PAGE}


def log_request(ctx):
    logger.info("%s %s", ctx.meta.method, ctx.meta.path)


INDEX_PAGE = """\
<input id=uname placeholder=name value=user1><br>
<input id=psswd placeholder=password value=Password123><br>
<input id=target placeholder=target_name><br>
<button id=create>create</button>
<button id=like>like</button>
<button id=del>delete</button>
<button id=inspect>inspect</button>
<pre id=out></pre>
<script>
  const log = text => { out.textContent = text + '\\n' + out.textContent };
  const api = async (path, method = 'POST', data = undefined) => {
    const response = await fetch(path, {
      method,
      headers: {'Content-Type': 'application/json'},
      body: data && JSON.stringify(data),
    });
    log(response.status + ': ' + await response.text());
  };
  const use = path => api(path, 'POST', {
    name: uname.value, password: psswd.value, target_name: target.value,
  });
  create.onclick = () => use('/user/create');
  like.onclick = () => use('/user/like');
  del.onclick = () => use('/user/delete');
  inspect.onclick = () => api('/inspect/' + target.value, 'GET');
</script>
"""

app = App(
    routes={
        "get /": index,
        "get /increment": increment,
        "post /echo": echo,
        "/user": {
            "before": [ensure_has({"name": str}), auto_hash("password")],
            "post /create": create_user,
            "/": {
                "before": [ensure_has(["name", "password"]), ensure_auth],
                "post /like": {"before": ensure_has("target_name"), "fn": like},
                "post /delete": delete_user,
            },
        },
        "get /inspect/:target_name": inspect_user,
    },
    events={"before": log_request},
    errors=[
        "name too short",
        "name too long",
        "password too short",
        "password missing digit",
        "password missing uppercase",
        "password missing lowercase",
        "field missing",
        "field bad type",
        "invalid user name",
        "invalid user credentials",
        "user name already exists",
        "invalid target user name",
        "target user already liked",
    ],
    start_immediately=False,
)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run()
