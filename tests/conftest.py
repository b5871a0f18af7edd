"""Shared fixtures: a small blog schema with resolvers and a webhook sink."""

import asyncio
from typing import Any

import httpx
import pytest
from graphql import GraphQLSchema, build_schema

from ottoman.http.query import QueryParams
from ottoman.http.request import Request
from ottoman.webhooks import WebhookClient

SDL = """
enum Role {
  ADMIN
  MEMBER
}

type User {
  id: ID!
  name: String!
  role: Role
  friends: [User!]!
  posts: [Post!]!
}

type Post {
  id: ID!
  title: String!
  tag: String
  author: User!
  comments(first: Int!): [String!]!
}

union SearchResult = User | Post

input PostInput {
  title: String!
  tag: String
}

type Query {
  user(id: ID!): User
  users(role: Role, ids: [ID!], limit: Int): [User!]!
  feed(tag: String): [Post!]!
  search(term: String!): [SearchResult!]!
  ping: String
}

type Mutation {
  addPost(input: PostInput!): Post!
  likePost(id: ID!): Post
}

type Subscription {
  onPost(tag: String): Post
}
"""

USERS: dict[str, dict[str, Any]] = {
    "1": {"id": "1", "name": "Ann", "friend_ids": ["2"]},
    "2": {"id": "2", "name": "Bob", "friend_ids": ["1"]},
}

POSTS: dict[str, dict[str, Any]] = {
    "10": {"id": "10", "title": "Hello", "tag": "intro", "author_id": "1"},
    "11": {"id": "11", "title": "Again", "tag": "misc", "author_id": "2"},
}


class PostBroker:
    """In-memory pub/sub feeding the ``onPost`` subscription."""

    def __init__(self) -> None:
        self.queues: list[asyncio.Queue[dict[str, Any]]] = []

    def listen(self, tag: str | None = None):
        # Register eagerly so events published right after subscribe() are seen
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.queues.append(queue)
        return self._drain(queue, tag)

    async def _drain(self, queue: asyncio.Queue[dict[str, Any]], tag: str | None):
        try:
            while True:
                post = await queue.get()
                if tag is None or post.get("tag") == tag:
                    yield {"onPost": post}
        finally:
            self.queues.remove(queue)

    def publish(self, post: dict[str, Any]) -> None:
        for queue in self.queues:
            queue.put_nowait(post)


def build_blog_schema(broker: PostBroker) -> GraphQLSchema:
    schema = build_schema(SDL)

    query = schema.query_type
    assert query is not None
    query.fields["user"].resolve = lambda _root, _info, id: USERS.get(id)
    query.fields["users"].resolve = _resolve_users
    query.fields["feed"].resolve = lambda _root, _info, tag=None: [
        p for p in POSTS.values() if tag is None or p["tag"] == tag
    ]
    query.fields["search"].resolve = lambda _root, _info, term: [
        item
        for item in (*USERS.values(), *POSTS.values())
        if term.lower() in item.get("name", item.get("title", "")).lower()
    ]
    query.fields["ping"].resolve = lambda _root, _info: "pong"

    user_type = schema.get_type("User")
    user_type.fields["friends"].resolve = lambda user, _info: [USERS[i] for i in user["friend_ids"]]
    user_type.fields["posts"].resolve = lambda user, _info: [
        p for p in POSTS.values() if p["author_id"] == user["id"]
    ]

    post_type = schema.get_type("Post")
    post_type.fields["author"].resolve = lambda post, _info: USERS[post["author_id"]]
    post_type.fields["comments"].resolve = lambda _post, _info, first: []

    search_result = schema.get_type("SearchResult")
    search_result.resolve_type = lambda obj, _info, _type: "User" if "name" in obj else "Post"

    mutation = schema.mutation_type
    assert mutation is not None
    mutation.fields["addPost"].resolve = _resolve_add_post
    mutation.fields["likePost"].resolve = lambda _root, _info, id: POSTS.get(id)

    subscription = schema.subscription_type
    assert subscription is not None
    subscription.fields["onPost"].subscribe = lambda _root, _info, tag=None: broker.listen(tag)

    return schema


def _resolve_users(_root, _info, role=None, ids=None, limit=None):
    users = [u for u in USERS.values() if ids is None or u["id"] in ids]
    return users[:limit] if limit is not None else users


def _resolve_add_post(_root, _info, input):
    return {"id": "99", "title": input["title"], "tag": input.get("tag"), "author_id": "1"}


@pytest.fixture
def broker() -> PostBroker:
    return PostBroker()


@pytest.fixture
def schema(broker: PostBroker) -> GraphQLSchema:
    return build_blog_schema(broker)


class WebhookSink:
    """Records webhook POSTs received through ``httpx.MockTransport``."""

    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status)

    def client(self) -> WebhookClient:
        transport = httpx.MockTransport(self.handler)
        return WebhookClient(client=httpx.AsyncClient(transport=transport))

    async def wait_for(self, count: int, timeout: float = 1.0) -> None:
        async def poll() -> None:
            while len(self.requests) < count:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(poll(), timeout)


@pytest.fixture
def sink() -> WebhookSink:
    return WebhookSink()


def make_request(
    method: str = "GET",
    path: str = "/",
    *,
    query: bytes = b"",
    body: bytes = b"",
    headers: tuple[tuple[bytes, bytes], ...] = (),
) -> Request:
    """Build a Request whose body is delivered in a single receive message."""
    sent = False

    async def receive() -> dict[str, Any]:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(
        method=method,
        path=path,
        query=QueryParams(query),
        headers=headers,
        path_params={},
        client=("127.0.0.1", 0),
        _receive=receive,
    )
