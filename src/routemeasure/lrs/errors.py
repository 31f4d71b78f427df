"""Exception types raised by the linear referencing engine and its query layer.

Every error derives from `LinearReferencingError` so callers can catch the
whole family at once, and also from the closest builtin so code written
against plain `ValueError`/`LookupError` keeps working.
"""


class LinearReferencingError(Exception):
    """Base class for all routemeasure errors."""


class InvalidGeometryError(LinearReferencingError, ValueError):
    """Geometry has no paths, no vertices, or a malformed vertex layout."""


class InvalidArgumentError(LinearReferencingError, ValueError):
    """Caller supplied an unusable argument (e.g. an empty candidate list)."""


class NotFoundError(LinearReferencingError, LookupError):
    """No segment, vertex or candidate matched the request."""


class MeasureNotFoundError(LinearReferencingError, LookupError):
    """Target measure lies outside the measure range of a polyline."""


class MeasureOutOfRangeError(LinearReferencingError, ValueError):
    """Target measure lies outside the measure range of a line segment."""


class ExternalQueryError(LinearReferencingError, RuntimeError):
    """The remote segment service failed or returned a truncated result."""
