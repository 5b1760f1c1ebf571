"""
Pytest configuration and shared SVG fixtures.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def simple_svg():
    return ('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 200" width="200" height="200">'
            '<path d="M 50 50 L 150 150" stroke="black"/></svg>')


@pytest.fixture
def offset_svg():
    return ('<svg xmlns="http://www.w3.org/2000/svg" viewBox="50 50 100 100">'
            '<path d="M 60 60 L 140 140"/></svg>')


@pytest.fixture
def no_viewbox_svg():
    return ('<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">'
            '<path d="M 20 30 L 80 90"/></svg>')


@pytest.fixture
def clip_path_svg():
    """Clip path in <defs> referenced from a transformed group."""
    return ('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 200">'
            '<defs><clipPath id="c"><rect x="0" y="0" width="50" height="50"/></clipPath></defs>'
            '<g transform="translate(100,100)" clip-path="url(#c)">'
            '<path d="M0 0 L40 40"/>'
            '</g></svg>')


@pytest.fixture
def shapes_only_svg():
    return ('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 300">'
            '<rect x="10" y="10" width="80" height="80"/>'
            '<circle cx="150" cy="150" r="40"/>'
            '<ellipse cx="250" cy="250" rx="30" ry="20"/>'
            '</svg>')


@pytest.fixture
def nested_groups_svg():
    return ('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 400">'
            '<g transform="translate(30,40)">'
            '<g transform="translate(10,20)">'
            '<path d="M0 0 L10 10"/>'
            '</g></g></svg>')
