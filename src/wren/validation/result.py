"""Validation issues — field-level failures and their rendering."""

from collections.abc import Iterable
from dataclasses import dataclass

import pydantic


@dataclass(frozen=True, slots=True)
class Issue:
    """One rejected field.

    ``location`` is the path into the input (``("items", 0, "name")``);
    empty when the input as a whole was rejected.
    """

    location: tuple[str | int, ...]
    message: str

    def __str__(self) -> str:
        if not self.location:
            return self.message
        where = ".".join(str(part) for part in self.location)
        return f"{where}: {self.message}"


def issues_from_pydantic(exc: pydantic.ValidationError) -> tuple[Issue, ...]:
    """Flatten a pydantic ``ValidationError`` into issues."""
    return tuple(
        Issue(location=tuple(error["loc"]), message=error["msg"])
        for error in exc.errors(include_url=False)
    )


def format_issues(issues: Iterable[Issue]) -> str:
    """Render issues as ``name: Field required; age: ...``."""
    return "; ".join(str(issue) for issue in issues)
