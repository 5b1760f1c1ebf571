"""Viewport (viewBox) model."""

import math
from dataclasses import dataclass

from .units import format_number


@dataclass(frozen=True)
class Viewport:
    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def is_valid(self):
        return self.width > 0 and self.height > 0

    @property
    def origin(self):
        return self.min_x, self.min_y

    @property
    def at_origin(self):
        return self.min_x == 0 and self.min_y == 0

    def to_attribute(self):
        return ' '.join(format_number(v) for v in (self.min_x, self.min_y, self.width, self.height))

    def to_dict(self):
        return {'minX': self.min_x, 'minY': self.min_y, 'width': self.width, 'height': self.height}

    def __str__(self):
        return self.to_attribute()


def parse_viewbox(viewbox_str):
    """Parse viewBox attribute into a Viewport, or None if absent/malformed."""
    if not viewbox_str:
        return None
    parts = viewbox_str.replace(',', ' ').split()
    if len(parts) != 4:
        return None
    try:
        values = [float(p) for p in parts]
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return Viewport(*values)
