"""Exception types raised by the engine."""

from __future__ import annotations

from typing import Hashable


class GeometryError(ValueError):
    """Raised when a change request violates the authoring contract."""


class UnknownEntityError(GeometryError):
    def __init__(self, entity: Hashable, referenced_by: Hashable = None):
        if referenced_by is None:
            message = f"unknown entity {entity!r}"
        else:
            message = f"definition of {referenced_by!r} references unknown entity {entity!r}"
        super().__init__(message)
        self.entity = entity
        self.referenced_by = referenced_by


class DuplicateEntityError(GeometryError):
    def __init__(self, entity: Hashable):
        super().__init__(f"entity {entity!r} is already defined")
        self.entity = entity


class CyclicReferenceError(GeometryError):
    def __init__(self, entity: Hashable):
        super().__init__(f"definition of {entity!r} would depend on itself")
        self.entity = entity


class ResolutionError(RuntimeError):
    """Raised when a definition cannot be resolved to concrete geometry."""


class DependencyCycleError(RuntimeError):
    """Raised when the dependency graph is found to contain a cycle."""


class SpatialIndexError(RuntimeError):
    """Raised when grid arithmetic produces a tile outside the table."""


__all__ = [
    "CyclicReferenceError",
    "DependencyCycleError",
    "DuplicateEntityError",
    "GeometryError",
    "ResolutionError",
    "SpatialIndexError",
    "UnknownEntityError",
]
