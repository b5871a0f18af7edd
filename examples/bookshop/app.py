"""Bookshop — a GraphQL schema served as REST routes.

Queries become GET routes, mutations POST routes, and the ``onBook``
subscription is available through the webhook endpoints:

    GET    /api/books?genre=fantasy
    GET    /api/book/1
    POST   /api/add-book        {"title": "...", "genre": "..."}
    POST   /api/webhook         {"subscription": "onBook", "url": "http://..."}
    DELETE /api/webhook/<id>

Run:
    cd examples/bookshop && python app.py
"""

import asyncio
import logging

from graphql import build_schema

from ottoman import App, Ottoman

schema = build_schema("""
    type Book {
      id: ID!
      title: String!
      genre: String
    }

    type Query {
      books(genre: String): [Book!]!
      book(id: ID!): Book
    }

    type Mutation {
      addBook(title: String!, genre: String): Book!
    }

    type Subscription {
      onBook(genre: String): Book
    }
""")

# ---------------------------------------------------------------------------
# In-memory storage and event fan-out
# ---------------------------------------------------------------------------

_books: dict[str, dict] = {
    "1": {"id": "1", "title": "The Hobbit", "genre": "fantasy"},
    "2": {"id": "2", "title": "Dune", "genre": "scifi"},
}
_listeners: list[asyncio.Queue] = []


async def _book_events(queue: asyncio.Queue, genre: str | None):
    try:
        while True:
            book = await queue.get()
            if genre is None or book["genre"] == genre:
                yield {"onBook": book}
    finally:
        _listeners.remove(queue)


def subscribe_on_book(_root, _info, genre=None):
    queue: asyncio.Queue = asyncio.Queue()
    _listeners.append(queue)
    return _book_events(queue, genre)


def add_book(_root, _info, title, genre=None):
    book = {"id": str(len(_books) + 1), "title": title, "genre": genre}
    _books[book["id"]] = book
    for queue in _listeners:
        queue.put_nowait(book)
    return book


schema.query_type.fields["books"].resolve = lambda _root, _info, genre=None: [
    b for b in _books.values() if genre is None or b["genre"] == genre
]
schema.query_type.fields["book"].resolve = lambda _root, _info, id: _books.get(id)
schema.mutation_type.fields["addBook"].resolve = add_book
schema.subscription_type.fields["onBook"].subscribe = subscribe_on_book

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = App(Ottoman(schema=schema, base_path="/api"))

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run()
