"""
Viewport rewriting.

Textual edits to the root <svg> open tag only; the rest of the document is
passed through byte for byte.
"""

import logging

from .errors import StageWarning
from .scanner import find_root, remove_attribute, set_attribute
from .viewbox import Viewport

log = logging.getLogger(__name__)

# Root attributes that would reintroduce an offset or distortion once the
# viewBox alone defines the coordinate system
SIZE_ATTRIBUTES = ('width', 'height', 'preserveAspectRatio')


def _rewrite_root(document, rewrite):
    root, _ = find_root(document)
    tag_text = document[root.start:root.end]
    return document[:root.start] + rewrite(tag_text) + document[root.end:]


def set_viewbox(document, viewport):
    """Replace or insert the root viewBox attribute."""
    value = viewport.to_attribute()
    return _rewrite_root(document, lambda tag: set_attribute(tag, 'viewBox', value))


def crop_to_bounds(document, bounds):
    """
    Crop the viewBox to the content bounds, removing surrounding whitespace.
    """
    viewport = bounds.to_viewport()
    log.info("Cropping viewBox to %s", viewport)
    return set_viewbox(document, viewport)


def normalize_viewbox(document, width, height):
    """
    Set the viewBox to "0 0 width height" and drop explicit size attributes
    so the document scales purely from its viewBox.
    """
    if width <= 0 or height <= 0:
        raise StageWarning(f"width and height must be positive, got {width} x {height}")

    viewport = Viewport(0.0, 0.0, width, height)

    def rewrite(tag):
        tag = set_attribute(tag, 'viewBox', viewport.to_attribute())
        for name in SIZE_ATTRIBUTES:
            tag = remove_attribute(tag, name)
        return tag

    log.info("Normalizing viewBox to %s", viewport)
    return _rewrite_root(document, rewrite)
