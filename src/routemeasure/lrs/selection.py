"""Pick the route feature nearest to a point."""
import logging
from typing import Any, Optional, Sequence

from routemeasure.lrs import projection
from routemeasure.lrs.errors import InvalidArgumentError, NotFoundError
from routemeasure.lrs.models import Feature, NearestPointResult

logger = logging.getLogger(__name__)


def nearest_feature(candidates: Sequence[Feature], point: Any) -> Feature:
    """Return the candidate whose geometry passes closest to ``point``.

    A single candidate is returned as-is without measuring anything.
    Candidates without geometry, or whose projection is empty, are skipped;
    on equal distances the earlier candidate wins.
    """
    if len(candidates) == 0:
        raise InvalidArgumentError('Invalid argument. Feature count = 0')
    if len(candidates) == 1:
        return candidates[0]

    nearest: Optional[NearestPointResult] = None
    nearest_candidate: Optional[Feature] = None
    for candidate in candidates:
        if candidate.geometry is None:
            continue
        result = projection.nearest_coordinate(candidate.geometry, point)
        if result.is_empty:
            continue
        if nearest is None or nearest.distance > result.distance:
            nearest = result
            nearest_candidate = candidate

    if nearest_candidate is None:
        raise NotFoundError('Nearest feature was not found.')
    logger.debug('nearest_feature: %d candidates, best distance %.6g', len(candidates), nearest.distance)
    return nearest_candidate
