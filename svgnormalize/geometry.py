"""
Path geometry engine.

Exact per-path bounds come from svgpathtools, which solves for curve and arc
extrema rather than using control points. Translation goes through the path
data rewriter so command structure survives the round trip.
"""

import logging
import math

from svgpathtools import parse_path

from .errors import GeometryError
from .pathdata import absolute_path_d, translate_path_d

log = logging.getLogger(__name__)


class PathGeometry:
    """
    Geometry engine for one pipeline run.

    Bounds are memoized per instance; create a new engine for each document.
    """

    def __init__(self):
        self._bounds_cache = {}

    def bounds(self, d):
        """Return the local (min_x, min_y, max_x, max_y) of path data d."""
        if d in self._bounds_cache:
            return self._bounds_cache[d]

        try:
            # Normalized first so compact arc flags ("0120") read the same as in translate()
            path = parse_path(absolute_path_d(d))
            if len(path) == 0:
                raise GeometryError("path has no drawable segments")
            # svgpathtools orders bbox as (xmin, xmax, ymin, ymax)
            xmin, xmax, ymin, ymax = path.bbox()
        except GeometryError:
            raise
        except Exception as e:
            raise GeometryError(f"could not measure path: {e}") from e

        box = (float(xmin), float(ymin), float(xmax), float(ymax))
        if not all(math.isfinite(v) for v in box):
            raise GeometryError("path bounds are not finite")

        self._bounds_cache[d] = box
        return box

    def translate(self, d, dx, dy):
        """Return path data d shifted by (dx, dy)."""
        try:
            shifted = translate_path_d(d, dx, dy)
        except Exception as e:
            raise GeometryError(f"could not translate path: {e}") from e
        if not shifted:
            raise GeometryError("path data contains no commands")
        return shifted


def describe_path(d, limit=50):
    """Shorten path data for log and warning messages."""
    d = ' '.join(d.split())
    return d if len(d) <= limit else d[:limit] + '...'
