"""
Output formatting: pretty print or minify.

Whitespace inside <text> elements is significant (it separates words and
tspans) and is never collapsed or re-indented.
"""

import re
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from .errors import StageWarning

XML_DECL_RE = re.compile(r'^\s*(<\?xml[^>]*\?>)\s*')
INTER_TAG_WS_RE = re.compile(r'>\s+<')
TEXT_ELEMENT_RE = re.compile(r'(<(?:[\w.-]+:)?text\b.*?</(?:[\w.-]+:)?text\s*>)', re.DOTALL)

INLINE_NODE_TYPES = (minidom.Node.TEXT_NODE, minidom.Node.CDATA_SECTION_NODE)


def minify_svg(document):
    """Remove whitespace between tags, outside of text elements."""
    parts = TEXT_ELEMENT_RE.split(document.strip())
    # split() with a capture group puts the text elements at odd indices
    return ''.join(part if i % 2 else INTER_TAG_WS_RE.sub('><', part) for i, part in enumerate(parts))


def _is_blank(node):
    return node.nodeType == minidom.Node.TEXT_NODE and not node.data.strip()


def _write(node, depth, indent, lines):
    pad = indent * depth
    if node.nodeType != minidom.Node.ELEMENT_NODE:
        if not _is_blank(node):
            lines.append(pad + node.toxml().strip())
        return

    children = [child for child in node.childNodes if not _is_blank(child)]
    mixed = node.localName == 'text' or any(child.nodeType in INLINE_NODE_TYPES for child in children)
    if mixed or not children:
        lines.append(pad + node.toxml())
        return

    empty_tag = node.cloneNode(False).toxml()
    lines.append(pad + empty_tag[:-2] + '>')
    for child in children:
        _write(child, depth + 1, indent, lines)
    lines.append(f'{pad}</{node.tagName}>')


def prettify(document, indent='  '):
    """Return a pretty-printed copy of the markup, keeping comments before the root."""
    declaration = XML_DECL_RE.match(document)
    body = document[declaration.end():] if declaration else document
    try:
        dom = minidom.parseString(body)
    except ExpatError as e:
        raise StageWarning(f"Could not format SVG: {e}") from e

    lines = []
    for node in dom.childNodes:
        _write(node, 0, indent, lines)
    body = '\n'.join(lines)
    if declaration:
        return declaration.group(1) + '\n' + body + '\n'
    return body + '\n'


def format_svg(document, minify=False):
    if minify:
        return minify_svg(document)
    return prettify(document)
