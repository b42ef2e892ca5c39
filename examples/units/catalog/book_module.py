"""Catalog unit declaring its components through register_components()."""

from modloader import ComponentSpec

BOOKS = [
    {"id": 1, "title": "The Name of the Rose"},
    {"id": 2, "title": "Foucault's Pendulum"},
]


class BookService:
    def find_all(self) -> list[dict]:
        return list(BOOKS)


def register_components():
    return [ComponentSpec(name="BookModule", factory=BookService)]
