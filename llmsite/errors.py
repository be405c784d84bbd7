from __future__ import annotations

from pathlib import Path


class CollectionError(Exception):
    """Fatal problem with the content collection; the build stops."""


class FrontMatterError(CollectionError):
    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: invalid front matter: {message}")
        self.path = path


class SchemaError(CollectionError):
    def __init__(self, path: Path, problems: list[str]):
        joined = "; ".join(problems)
        super().__init__(f"{path}: {joined}")
        self.path = path
        self.problems = problems


class DuplicateIdError(CollectionError):
    def __init__(self, entry_id: str, first: Path, second: Path):
        super().__init__(f"Duplicate id '{entry_id}': {first} and {second}")
        self.entry_id = entry_id
        self.paths = (first, second)
