"""
SVG optimizer.

Runs a list of named plugins over an ElementTree parse of the document.
Two presets are used by the pipeline:

PREPROCESS_PLUGINS - converts basic shapes to <path>, pushes group
    transforms down to their children and bakes transforms into path data,
    so the scanner sees plain paths with no transforms where that is safe.

OPTIMIZE_PLUGINS - lossless size reduction: drops metadata, editor data and
    empty containers, collapses attribute-less groups and sorts attributes.
    viewBox and the SVG namespace declaration are always kept.
"""

import logging
import re
import xml.etree.ElementTree as ET

from .errors import ConfigError, OptimizationError
from .matrix import is_identity, matrix_scale, parse_transform
from .pathdata import transform_path_d
from .units import format_number, parse_length, parse_numbers

log = logging.getLogger(__name__)

SVG_NS = 'http://www.w3.org/2000/svg'
INKSCAPE_NS = 'http://www.inkscape.org/namespaces/inkscape'
SODIPODI_NS = 'http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd'

NAMESPACES = {
    '': SVG_NS,
    'xlink': 'http://www.w3.org/1999/xlink',
    'sodipodi': SODIPODI_NS,
    'inkscape': INKSCAPE_NS,
    'rdf': 'http://www.w3.org/1999/02/22-rdf-syntax-ns#',
    'cc': 'http://creativecommons.org/ns#',
    'dc': 'http://purl.org/dc/elements/1.1/',
}

EDITOR_NAMESPACES = (INKSCAPE_NS, SODIPODI_NS)

XML_DECL_RE = re.compile(r'^\s*<\?xml[^>]*\?>')
XMLNS_RE = re.compile(r'xmlns:([A-Za-z_][\w.-]*)\s*=\s*["\']([^"\']+)["\']')

# Properties that make a group's transform unsafe to move or bake
REFERENCE_ATTRS = ('clip-path', 'mask', 'filter')

SHAPE_ATTRS = {
    'rect': ('x', 'y', 'width', 'height', 'rx', 'ry'),
    'circle': ('cx', 'cy', 'r'),
    'ellipse': ('cx', 'cy', 'rx', 'ry'),
    'line': ('x1', 'y1', 'x2', 'y2'),
    'polyline': ('points',),
    'polygon': ('points',),
}

ATTR_ORDER = ('id', 'width', 'height', 'x', 'x1', 'x2', 'y', 'y1', 'y2',
              'cx', 'cy', 'r', 'fill', 'stroke', 'marker', 'd', 'points')


def local_name(tag):
    return tag.split('}')[-1] if '}' in tag else tag


def namespace_of(tag):
    return tag[:tag.index('}') + 1] if '}' in tag else ''


def style_value(elem, name):
    """Value of a presentation property, from the style attribute first."""
    style = elem.get('style', '')
    match = re.search(r'(?:^|;)\s*' + re.escape(name) + r'\s*:\s*([^;]+)', style)
    if match:
        return match.group(1).strip()
    return elem.get(name)


def register_namespaces(document):
    """Register known and document-declared prefixes so output keeps them."""
    for prefix, uri in NAMESPACES.items():
        ET.register_namespace(prefix, uri)
    for prefix, uri in XMLNS_RE.findall(document):
        if re.match(r'ns\d+$', prefix) or prefix == 'xml':
            continue
        ET.register_namespace(prefix, uri)


# =============================================================================
# SHAPES TO PATHS
# =============================================================================

def _lengths(elem, names):
    values = [parse_length(elem.get(name, '0')) for name in names]
    return None if any(v is None for v in values) else values


def shape_path_data(elem, convert_arcs=True):
    """Equivalent path data for a basic shape, or None if it can't be converted."""
    tag = local_name(elem.tag)
    f = format_number

    if tag == 'rect':
        values = _lengths(elem, ('x', 'y', 'width', 'height'))
        if values is None:
            return None
        x, y, w, h = values
        if w <= 0 or h <= 0:
            return None
        rx = parse_length(elem.get('rx')) if elem.get('rx') else None
        ry = parse_length(elem.get('ry')) if elem.get('ry') else None
        rx = ry if rx is None else rx
        ry = rx if ry is None else ry
        rx = min(max(rx or 0.0, 0.0), w / 2)
        ry = min(max(ry or 0.0, 0.0), h / 2)
        if rx == 0 or ry == 0:
            return f'M{f(x)} {f(y)} H{f(x + w)} V{f(y + h)} H{f(x)} Z'
        if not convert_arcs:
            return None
        arc = f'A{f(rx)} {f(ry)} 0 0 1 '
        return (f'M{f(x + rx)} {f(y)} H{f(x + w - rx)} {arc}{f(x + w)} {f(y + ry)} '
                f'V{f(y + h - ry)} {arc}{f(x + w - rx)} {f(y + h)} '
                f'H{f(x + rx)} {arc}{f(x)} {f(y + h - ry)} '
                f'V{f(y + ry)} {arc}{f(x + rx)} {f(y)} Z')

    if tag in ('circle', 'ellipse'):
        if not convert_arcs:
            return None
        if tag == 'circle':
            values = _lengths(elem, ('cx', 'cy', 'r'))
            if values is None:
                return None
            cx, cy, rx = values
            ry = rx
        else:
            values = _lengths(elem, ('cx', 'cy', 'rx', 'ry'))
            if values is None:
                return None
            cx, cy, rx, ry = values
        if rx <= 0 or ry <= 0:
            return None
        arc = f'A{f(rx)} {f(ry)} 0 1 0 '
        return (f'M{f(cx - rx)} {f(cy)} {arc}{f(cx + rx)} {f(cy)} '
                f'{arc}{f(cx - rx)} {f(cy)} Z')

    if tag == 'line':
        values = _lengths(elem, ('x1', 'y1', 'x2', 'y2'))
        if values is None:
            return None
        x1, y1, x2, y2 = values
        return f'M{f(x1)} {f(y1)} L{f(x2)} {f(y2)}'

    if tag in ('polyline', 'polygon'):
        nums = parse_numbers(elem.get('points'))
        if len(nums) < 4:
            return None
        coords = [f'{f(nums[i])} {f(nums[i + 1])}' for i in range(0, len(nums) - 1, 2)]
        d = f'M{coords[0]} L' + ' '.join(coords[1:])
        return d + ' Z' if tag == 'polygon' else d

    return None


def convert_shapes_to_paths(root, convert_arcs=True):
    parent_map = {c: p for p in root.iter() for c in p}
    converted = 0

    for elem in list(root.iter()):
        tag = local_name(elem.tag)
        if tag not in SHAPE_ATTRS or elem not in parent_map:
            continue
        d = shape_path_data(elem, convert_arcs=convert_arcs)
        if d is None:
            continue

        attrib = {k: v for k, v in elem.attrib.items() if k not in SHAPE_ATTRS[tag]}
        attrib['d'] = d
        path = ET.Element(namespace_of(elem.tag) + 'path', attrib)
        path.text = elem.text
        path.tail = elem.tail
        path.extend(list(elem))

        parent = parent_map[elem]
        parent[list(parent).index(elem)] = path
        converted += 1

    log.debug("Converted %d shapes to paths", converted)


# =============================================================================
# TRANSFORMS
# =============================================================================

def move_group_transforms(root):
    """
    Push group transforms down onto the group's children.

    Only done when the group doesn't reference a clip path, mask or filter
    (those resolve in the group's own space) and no child has an id that a
    <use> could reference.
    """
    def visit(elem):
        if local_name(elem.tag) == 'g' and elem.get('transform'):
            children = list(elem)
            movable = (
                children
                and not _has_references(elem)
                and not any(child.get('id') for child in children)
                and all(local_name(child.tag) in ('g', 'path') for child in children)
            )
            if movable:
                group_transform = elem.attrib.pop('transform')
                for child in children:
                    own = child.get('transform')
                    child.set('transform', f'{group_transform} {own}' if own else group_transform)
        for child in elem:
            visit(child)

    visit(root)


def _has_references(elem):
    return any(style_value(elem, attr) not in (None, '', 'none') for attr in REFERENCE_ATTRS)


def _is_paint_server(paint):
    return bool(paint) and paint.startswith('url(')


def _is_stroked(stroke):
    return bool(stroke) and stroke != 'none'


def apply_transforms(root):
    """
    Bake path transform attributes into path coordinates.

    Stroke width is scaled with the transform; paths whose stroke would be
    distorted by a non-uniform scale keep their transform attribute.
    """
    baked = 0

    def visit(elem, inherited_fill, inherited_stroke, inherited_width):
        nonlocal baked
        fill = style_value(elem, 'fill') or inherited_fill
        stroke = style_value(elem, 'stroke') or inherited_stroke
        stroke_width = style_value(elem, 'stroke-width') or inherited_width

        transform = elem.get('transform')
        if local_name(elem.tag) == 'path' and transform and elem.get('d'):
            if _bake(elem, transform, fill, stroke, stroke_width):
                baked += 1

        for child in elem:
            visit(child, fill, stroke, stroke_width)

    visit(root, None, None, None)
    log.debug("Baked transforms into %d paths", baked)


def _bake(elem, transform, fill, stroke, stroke_width):
    if _has_references(elem):
        return False
    # Gradients and patterns in user space units would stay behind
    if _is_paint_server(fill) or _is_paint_server(stroke):
        return False

    matrix = parse_transform(transform)
    if is_identity(matrix):
        del elem.attrib['transform']
        return True

    scale_x, scale_y = matrix_scale(matrix)
    if _is_stroked(stroke):
        if style_value(elem, 'vector-effect') == 'non-scaling-stroke':
            return False
        if abs(scale_x - scale_y) > 1e-9:
            return False
        if abs(scale_x - 1) > 1e-9:
            if re.search(r'(?:^|;)\s*stroke-width\s*:', elem.get('style', '')):
                return False
            width = parse_length(stroke_width) if stroke_width else 1.0
            if width is None:
                return False
            elem.set('stroke-width', format_number(width * scale_x))

    elem.set('d', transform_path_d(elem.get('d'), matrix))
    del elem.attrib['transform']
    return True


# =============================================================================
# CLEANUP
# =============================================================================

def collapse_groups(root):
    """Replace attribute-less groups with their children."""
    for parent in list(root.iter()):
        i = 0
        while i < len(parent):
            child = parent[i]
            if local_name(child.tag) == 'g' and not child.attrib:
                children = list(child)
                if children:
                    children[-1].tail = child.tail
                parent[i:i + 1] = children
                continue
            i += 1


def remove_metadata(root):
    for parent in list(root.iter()):
        for child in list(parent):
            if local_name(child.tag) == 'metadata':
                parent.remove(child)


def _is_editor_name(name):
    return any(name.startswith('{' + ns + '}') for ns in EDITOR_NAMESPACES)


def remove_editor_data(root):
    """Drop Inkscape and Sodipodi elements and attributes."""
    for parent in list(root.iter()):
        for child in list(parent):
            if _is_editor_name(child.tag):
                parent.remove(child)
    for elem in root.iter():
        for key in [k for k in elem.attrib if _is_editor_name(k)]:
            del elem.attrib[key]


def remove_empty_containers(root):
    removed = True
    while removed:
        removed = False
        for parent in list(root.iter()):
            for child in list(parent):
                if (local_name(child.tag) in ('g', 'defs') and len(child) == 0
                        and not child.get('id') and not (child.text or '').strip()):
                    parent.remove(child)
                    removed = True


def sort_attrs(root):
    def key(name):
        plain = local_name(name)
        if plain in ATTR_ORDER and not name.startswith('{'):
            return (0, ATTR_ORDER.index(plain), name)
        return (1, 0, name)

    for elem in root.iter():
        items = sorted(elem.attrib.items(), key=lambda item: key(item[0]))
        elem.attrib.clear()
        elem.attrib.update(items)


# =============================================================================
# RUNNER
# =============================================================================

PLUGINS = {
    'convert_shapes_to_paths': convert_shapes_to_paths,
    'move_group_transforms': move_group_transforms,
    'apply_transforms': apply_transforms,
    'collapse_groups': collapse_groups,
    'remove_metadata': remove_metadata,
    'remove_editor_data': remove_editor_data,
    'remove_empty_containers': remove_empty_containers,
    'sort_attrs': sort_attrs,
}

PREPROCESS_PLUGINS = (
    ('convert_shapes_to_paths', {'convert_arcs': True}),
    'move_group_transforms',
    'apply_transforms',
    'collapse_groups',
)

OPTIMIZE_PLUGINS = (
    'remove_metadata',
    'remove_editor_data',
    'remove_empty_containers',
    'collapse_groups',
    'sort_attrs',
)


def _resolve(plugin):
    if isinstance(plugin, str):
        name, params = plugin, {}
    else:
        name, params = plugin
    if name not in PLUGINS:
        raise ConfigError(f"Unknown optimizer plugin: {name}")
    return name, PLUGINS[name], dict(params or {})


def optimize(document, plugins=OPTIMIZE_PLUGINS):
    """
    Run plugins over document and return the rewritten markup.

    Raises ConfigError for unknown plugin names and OptimizationError when
    the markup can't be parsed as XML.
    """
    resolved = [_resolve(p) for p in plugins]

    register_namespaces(document)
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise OptimizationError(f"Could not parse SVG: {e}") from e

    for name, func, params in resolved:
        log.debug("Running optimizer plugin %s", name)
        func(root, **params)

    output = ET.tostring(root, encoding='unicode')
    declaration = XML_DECL_RE.match(document)
    if declaration:
        output = declaration.group(0).strip() + '\n' + output
    return output


def preprocess(document):
    """Convert shapes to paths and bake transforms where that is safe."""
    return optimize(document, PREPROCESS_PLUGINS)
