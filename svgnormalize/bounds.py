"""
Transform-aware content bounds.

Each geometry's local box comes from the geometry engine. When the
geometry's accumulated matrix is not the identity, all four corners are
mapped through it with shapely and the enclosing box of the mapped corners
is used, since rotation or skew moves the extremes off the original corners.
"""

import logging
import math
from dataclasses import dataclass

from shapely.affinity import affine_transform
from shapely.geometry import MultiPoint

from .errors import DegenerateBoundsError, EmptyGeometryError, GeometryError
from .geometry import PathGeometry, describe_path
from .matrix import is_identity
from .scanner import scan
from .viewbox import Viewport

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

    def union(self, other):
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def to_viewport(self):
        return Viewport(self.min_x, self.min_y, self.width, self.height)

    def to_dict(self):
        return {
            'minX': self.min_x, 'minY': self.min_y,
            'maxX': self.max_x, 'maxY': self.max_y,
            'width': self.width, 'height': self.height,
        }


def map_bounds(box, matrix):
    """Axis-aligned box enclosing the four corners of box mapped through matrix."""
    min_x, min_y, max_x, max_y = box
    corners = MultiPoint([(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)])
    a, b, c, d, e, f = matrix
    # shapely expects [a, b, d, e, xoff, yoff] for x' = a*x + b*y + xoff
    return affine_transform(corners, [a, c, b, d, e, f]).bounds


def compute_bounds(records, engine=None, warnings=None):
    """
    Union the transform-aware bounds of a sequence of GeometryRecords.

    Records the geometry engine can't measure are skipped with a warning.
    Raises EmptyGeometryError for an empty input and DegenerateBoundsError
    when no finite box results.
    """
    if not records:
        raise EmptyGeometryError("No geometry to measure")

    engine = engine or PathGeometry()
    result = None

    for record in records:
        try:
            local = engine.bounds(record.data)
        except GeometryError as e:
            message = f"Failed to calculate bounds for {record.tag}: {describe_path(record.data)} ({e})"
            log.warning(message)
            if warnings is not None:
                warnings.append(message)
            continue

        if not is_identity(record.matrix):
            local = map_bounds(local, record.matrix)

        box = BoundingBox(*local)
        result = box if result is None else result.union(box)

    if result is None or not all(math.isfinite(v) for v in (result.min_x, result.min_y, result.max_x, result.max_y)):
        raise DegenerateBoundsError("Failed to calculate bounds for any geometry")

    return result


def content_bounds(document, engine=None, warnings=None):
    """Scan document and return the bounds of its visible geometry."""
    return compute_bounds(scan(document).geometry, engine=engine, warnings=warnings)
