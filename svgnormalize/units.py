"""Number parsing and formatting shared by the attribute and path rewriters."""

import re

NUMBER_RE = re.compile(r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')

# User units per unit, at 96 dpi
UNIT_SCALE = {
    '': 1.0,
    'px': 1.0,
    'pt': 96.0 / 72.0,
    'pc': 16.0,
    'in': 96.0,
    'mm': 96.0 / 25.4,
    'cm': 96.0 / 2.54,
}


def parse_numbers(text):
    """Return every number in text as a float, in order."""
    if not text:
        return []
    return [float(n) for n in NUMBER_RE.findall(text)]


def parse_length(value):
    """
    Parse a length attribute such as "12", "12px" or "3mm" into user units.

    Returns None for missing, relative (%, em) or unparseable values.
    """
    if value is None:
        return None
    val = str(value).strip()
    match = re.fullmatch(r'(' + NUMBER_RE.pattern + r')\s*([a-z]*)', val, re.IGNORECASE)
    if not match:
        return None
    unit = match.group(2).lower()
    if unit not in UNIT_SCALE:
        return None
    return float(match.group(1)) * UNIT_SCALE[unit]


def parse_position(value):
    """Like parse_length, but a missing x/y means 0. Unresolvable values still give None."""
    if value is None:
        return 0.0
    return parse_length(value)


def format_number(value, precision=6):
    """Format a float compactly: fixed precision, no trailing zeros, no -0."""
    text = f'{value:.{precision}f}'
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        text = '0'
    return text
