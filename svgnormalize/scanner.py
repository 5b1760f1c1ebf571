"""
Structural scanner.

A single left-to-right pass over the raw markup that recovers every visible
drawable element together with its accumulated transform. No element tree is
built: two stacks answer "am I inside a non-visual container" and "which group
transforms are active" while the tags stream past.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import MalformedDocumentError
from .matrix import IDENTITY, AffineMatrix, multiply, parse_transform, translation
from .units import format_number, parse_length, parse_position
from .viewbox import Viewport, parse_viewbox

log = logging.getLogger(__name__)

# Children of these resolve their coordinates in the referencing element's space
NON_VISUAL_TAGS = {'defs', 'clippath', 'mask', 'filter', 'symbol', 'pattern', 'marker'}

GROUPING_TAGS = {'g', 'a', 'switch', 'svg'}

TOKEN_RE = re.compile(
    r'<!--.*?-->'
    r'|<!\[CDATA\[.*?\]\]>'
    r'|<\?.*?\?>'
    r'|<!(?:[^>"\'\[]|"[^"]*"|\'[^\']*\'|\[[^\]]*\])*>'
    r'|<(/?)([A-Za-z_][\w.:-]*)((?:[^>"\']|"[^"]*"|\'[^\']*\')*)>',
    re.DOTALL,
)

ATTR_RE = re.compile(r'([^\s=/>]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')


# =============================================================================
# TAG TOKENIZER
# =============================================================================

@dataclass(frozen=True)
class Tag:
    qname: str
    start: int
    end: int
    closing: bool
    self_closing: bool
    attrs: dict = field(default_factory=dict)

    @property
    def name(self):
        """Local name, lowercased, without a namespace prefix."""
        return self.qname.rsplit(':', 1)[-1].lower()


def parse_attributes(attr_text):
    attrs = {}
    for match in ATTR_RE.finditer(attr_text):
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attrs[match.group(1)] = value
    return attrs


def iter_tags(document, pos=0):
    """Yield a Tag for every element tag, skipping comments, PIs, DOCTYPE and CDATA."""
    for match in TOKEN_RE.finditer(document, pos):
        qname = match.group(2)
        if qname is None:
            continue
        attr_text = match.group(3) or ''
        closing = match.group(1) == '/'
        yield Tag(
            qname=qname,
            start=match.start(),
            end=match.end(),
            closing=closing,
            self_closing=not closing and attr_text.rstrip().endswith('/'),
            attrs={} if closing else parse_attributes(attr_text),
        )


def find_root(document):
    """
    Locate the root <svg> element.

    Returns (open_tag, close_tag). close_tag is the last </svg> in the
    document, or None when the root is self-closing or never closed.
    Raises MalformedDocumentError when there is no <svg> open tag at all.
    """
    open_tag = None
    close_tag = None
    for tag in iter_tags(document):
        if tag.name != 'svg':
            continue
        if open_tag is None:
            if not tag.closing:
                open_tag = tag
        elif tag.closing:
            close_tag = tag
    if open_tag is None:
        raise MalformedDocumentError("No <svg> element found in document")
    if open_tag.self_closing:
        close_tag = None
    return open_tag, close_tag


# =============================================================================
# TAG TEXT EDITING
# =============================================================================

def _attribute_span(tag_text, name):
    # Skip past the element name so it can't be mistaken for an attribute
    name_end = re.match(r'</?[^\s/>]+', tag_text).end()
    for match in ATTR_RE.finditer(tag_text, name_end):
        if match.group(1) == name:
            return match
    return None


def set_attribute(tag_text, name, value):
    """Replace or insert an attribute in the text of an open tag."""
    match = _attribute_span(tag_text, name)
    if match:
        return f'{tag_text[:match.start()]}{name}="{value}"{tag_text[match.end():]}'
    name_end = re.match(r'<[^\s/>]+', tag_text).end()
    return f'{tag_text[:name_end]} {name}="{value}"{tag_text[name_end:]}'


def remove_attribute(tag_text, name):
    match = _attribute_span(tag_text, name)
    if not match:
        return tag_text
    start = match.start()
    while start > 0 and tag_text[start - 1].isspace():
        start -= 1
    return tag_text[:start] + tag_text[match.end():]


# =============================================================================
# SCANNING
# =============================================================================

@dataclass(frozen=True)
class GeometryRecord:
    data: str
    matrix: AffineMatrix = IDENTITY
    tag: str = 'path'


@dataclass(frozen=True)
class ScanResult:
    viewport: Optional[Viewport]
    declared_width: Optional[str]
    declared_height: Optional[str]
    geometry: Tuple[GeometryRecord, ...]
    raw_document: str
    has_group_transforms: bool = False

    @property
    def is_empty(self):
        return not self.geometry


def image_path_data(attrs):
    """
    Synthetic rectangle path data for an <image>, or None when the image has
    no positive, parseable width and height or a position that can't be
    resolved (e.g. a percentage).
    """
    width = parse_length(attrs.get('width'))
    height = parse_length(attrs.get('height'))
    if width is None or height is None or width <= 0 or height <= 0:
        return None
    x = parse_position(attrs.get('x'))
    y = parse_position(attrs.get('y'))
    if x is None or y is None:
        return None
    return (f'M{format_number(x)} {format_number(y)} H{format_number(x + width)} '
            f'V{format_number(y + height)} H{format_number(x)} Z')


def _group_matrix(tag):
    matrix = parse_transform(tag.attrs.get('transform'))
    if tag.name == 'svg':
        # A nested viewport places its content at (x, y)
        x = parse_length(tag.attrs.get('x')) or 0.0
        y = parse_length(tag.attrs.get('y')) or 0.0
        matrix = multiply(matrix, translation(x, y))
    return matrix


def _pop_to(stack, name):
    """Pop stack down to and including the last entry named name."""
    for i in range(len(stack) - 1, -1, -1):
        if stack[i] == name:
            del stack[i:]
            return


def scan(document):
    """
    Scan an SVG document for visible drawable geometry.

    Raises MalformedDocumentError only when no root <svg> element exists;
    every other structural anomaly leads to omission.
    """
    if not isinstance(document, str) or not document.strip():
        raise MalformedDocumentError("Document is empty or not a string")

    root, _ = find_root(document)

    hidden = []
    groups = [IDENTITY]
    records = []
    group_transforms = False

    for tag in iter_tags(document, root.end):
        name = tag.name

        if tag.closing:
            if name in NON_VISUAL_TAGS:
                _pop_to(hidden, name)
            elif name in GROUPING_TAGS and len(groups) > 1:
                groups.pop()
            continue

        if name in GROUPING_TAGS and 'transform' in tag.attrs:
            group_transforms = True

        if name in NON_VISUAL_TAGS:
            if not tag.self_closing:
                hidden.append(name)
            continue

        if name in GROUPING_TAGS:
            if not tag.self_closing:
                groups.append(multiply(groups[-1], _group_matrix(tag)))
            continue

        if hidden:
            continue

        if name == 'path':
            data = tag.attrs.get('d', '').strip()
        elif name == 'image':
            data = image_path_data(tag.attrs)
        else:
            continue

        if not data:
            continue

        matrix = groups[-1]
        if tag.attrs.get('transform'):
            matrix = multiply(matrix, parse_transform(tag.attrs['transform']))
        records.append(GeometryRecord(data=data, matrix=matrix, tag=name))

    log.debug("Scanned %d drawable elements", len(records))

    return ScanResult(
        viewport=parse_viewbox(root.attrs.get('viewBox')),
        declared_width=root.attrs.get('width'),
        declared_height=root.attrs.get('height'),
        geometry=tuple(records),
        raw_document=document,
        has_group_transforms=group_transforms,
    )


def has_group_transforms(document):
    """Whether any grouping element below the root carries a transform attribute."""
    root, _ = find_root(document)
    return any(
        not tag.closing and tag.name in GROUPING_TAGS and 'transform' in tag.attrs
        for tag in iter_tags(document, root.end)
    )
