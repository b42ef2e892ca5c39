"""Catalog unit marking its component with the @component decorator."""

from modloader import component

MOVIES = [{"id": 1, "title": "Stalker"}]


@component(name="MovieModule")
class MovieService:
    def find_all(self) -> list[dict]:
        return list(MOVIES)
