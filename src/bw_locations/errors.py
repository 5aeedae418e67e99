from __future__ import annotations


class LocationError(Exception):
    """Base class for location subsystem failures."""


class ValidationError(LocationError, ValueError):
    """The caller's request is malformed (short query, bad limit, ...).

    Distinct from an empty result: a valid query with no matches is not an
    error.
    """


class NotFoundError(LocationError, LookupError):
    """A referenced district/settlement/ward/plot id does not exist."""

    def __init__(self, kind: str, entity_id) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} not found: {entity_id}")


class DatasetError(LocationError, ValueError):
    """The reference dataset violates a hierarchy invariant."""
