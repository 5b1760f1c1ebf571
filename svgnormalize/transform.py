"""
Coordinate normalization.

Moves content by the negative of a target offset so that the offset point
lands on the origin. One of two strategies is chosen per document:

DIRECT_SHIFT - no group carries a transform, so every geometry (including
    clip paths and masks inside <defs>) lives in root space and can be shifted
    in place by the same amount.

WRAP_GROUP - some group carries a transform. Definitions may then be
    referenced from differently transformed contexts, and shifting only some
    coordinate data would desynchronize them. Instead the whole root content
    is wrapped in one translate group, which keeps every relative
    relationship intact.
"""

import enum
import logging

from .errors import GeometryError, SingularMatrixError, StageWarning
from .geometry import PathGeometry, describe_path
from .matrix import AffineMatrix, format_translate, invert, parse_transform, transform_point
from .scanner import find_root, has_group_transforms, iter_tags, set_attribute
from .units import format_number, parse_position

log = logging.getLogger(__name__)


class ShiftStrategy(enum.Enum):
    DIRECT_SHIFT = 'direct-shift'
    WRAP_GROUP = 'wrap-group'


def select_strategy(document):
    if has_group_transforms(document):
        return ShiftStrategy.WRAP_GROUP
    return ShiftStrategy.DIRECT_SHIFT


def _warn(warnings, message):
    log.warning(message)
    if warnings is not None:
        warnings.append(message)


# =============================================================================
# WRAPPER GROUP
# =============================================================================

def wrap_with_translate(document, dx, dy):
    """Wrap everything inside the root element in <g transform="translate(dx, dy)">."""
    root, close = find_root(document)
    if close is None:
        raise StageWarning("Root <svg> element has no closing tag to wrap content in")

    return (
        document[:root.end]
        + f'<g transform="{format_translate(dx, dy)}">'
        + document[root.end:close.start]
        + '</g>'
        + document[close.start:]
    )


# =============================================================================
# DIRECT SHIFT
# =============================================================================

def local_delta(dx, dy, transform_str):
    """
    The shift to apply to an element's own coordinates so that, after its
    transform attribute, it moves by (dx, dy) in the parent space.
    """
    m = parse_transform(transform_str)
    linear = AffineMatrix(m.a, m.b, m.c, m.d, 0.0, 0.0)
    return transform_point(dx, dy, invert(linear))


def _shift_path(tag_text, attrs, dx, dy, engine):
    d = attrs.get('d')
    if not d or not d.strip():
        return tag_text
    return set_attribute(tag_text, 'd', engine.translate(d, dx, dy))


def _shift_image(tag_text, attrs, dx, dy):
    x = parse_position(attrs.get('x'))
    y = parse_position(attrs.get('y'))
    if x is None or y is None:
        raise GeometryError(f"position x={attrs.get('x')!r} y={attrs.get('y')!r} can't be shifted")
    tag_text = set_attribute(tag_text, 'x', format_number(x + dx))
    return set_attribute(tag_text, 'y', format_number(y + dy))


def shift_geometry(document, dx, dy, engine=None, warnings=None):
    """
    Shift every <path> and <image> in the document by (dx, dy).

    A failure on one element leaves that element unshifted and adds a
    warning; it never aborts the document.
    """
    engine = engine or PathGeometry()
    root, _ = find_root(document)

    pieces = []
    pos = 0
    shifted = 0

    for tag in iter_tags(document, root.end):
        if tag.closing or tag.name not in ('path', 'image'):
            continue

        tag_text = document[tag.start:tag.end]
        try:
            ldx, ldy = dx, dy
            if tag.attrs.get('transform'):
                ldx, ldy = local_delta(dx, dy, tag.attrs['transform'])
            if tag.name == 'path':
                new_text = _shift_path(tag_text, tag.attrs, ldx, ldy, engine)
            else:
                new_text = _shift_image(tag_text, tag.attrs, ldx, ldy)
        except (GeometryError, SingularMatrixError) as e:
            if tag.name == 'path':
                label = describe_path(tag.attrs.get('d', ''))
            else:
                label = tag.attrs.get('href') or tag.attrs.get('xlink:href') or ''
            _warn(warnings, f"Failed to shift {tag.name} {label}: {e}")
            continue

        if new_text != tag_text:
            pieces.append(document[pos:tag.start])
            pieces.append(new_text)
            pos = tag.end
            shifted += 1

    pieces.append(document[pos:])
    log.info("Shifted %d elements by (%s, %s)", shifted, format_number(dx), format_number(dy))
    return ''.join(pieces)


def normalize_to_origin(document, offset, engine=None, warnings=None):
    """
    Move content so the point offset = (x, y) becomes the origin.

    No-op when offset is (0, 0).
    """
    x, y = offset
    if x == 0 and y == 0:
        return document

    dx, dy = -x, -y
    strategy = select_strategy(document)
    log.info("Normalizing coordinates with %s strategy", strategy.value)

    if strategy is ShiftStrategy.WRAP_GROUP:
        return wrap_with_translate(document, dx, dy)
    return shift_geometry(document, dx, dy, engine=engine, warnings=warnings)
