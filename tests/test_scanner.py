"""
Unit tests for svgnormalize.scanner.
"""
import pytest

from svgnormalize.errors import MalformedDocumentError
from svgnormalize.matrix import IDENTITY
from svgnormalize.scanner import (
    find_root,
    has_group_transforms,
    image_path_data,
    iter_tags,
    remove_attribute,
    scan,
    set_attribute,
)
from svgnormalize.viewbox import Viewport


def svg(body, attrs='viewBox="0 0 100 100"'):
    return f'<svg xmlns="http://www.w3.org/2000/svg" {attrs}>{body}</svg>'


class TestTokenizer:

    def test_skips_comments_and_declarations(self):
        doc = ('<?xml version="1.0"?><!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "x.dtd">'
               '<svg><!-- <path d="M0 0"/> --><path d="M1 1"/></svg>')
        names = [(t.name, t.closing) for t in iter_tags(doc)]
        assert names == [('svg', False), ('path', False), ('svg', True)]

    def test_quoted_gt_in_attribute(self):
        tags = list(iter_tags('<svg><path data-x="a>b" d="M1 1 L2 2"/></svg>'))
        path = tags[1]
        assert path.attrs == {'data-x': 'a>b', 'd': 'M1 1 L2 2'}
        assert path.self_closing

    def test_namespace_prefix(self):
        tag = next(iter_tags('<svg:clipPath id="c">'))
        assert tag.qname == 'svg:clipPath'
        assert tag.name == 'clippath'


class TestFindRoot:

    def test_open_and_close(self):
        doc = svg('<path d="M0 0 L1 1"/>')
        root, close = find_root(doc)
        assert doc[root.start:root.end].startswith('<svg')
        assert doc[close.start:close.end] == '</svg>'

    def test_unclosed_root(self):
        root, close = find_root('<svg viewBox="0 0 1 1"><path d="M0 0"/>')
        assert close is None

    def test_missing_root(self):
        with pytest.raises(MalformedDocumentError):
            find_root('<html><body/></html>')


class TestAttributeEditing:

    def test_replace(self):
        assert set_attribute('<svg viewBox="0 0 1 1">', 'viewBox', '1 2 3 4') == '<svg viewBox="1 2 3 4">'

    def test_insert(self):
        assert set_attribute('<svg width="5">', 'viewBox', '0 0 5 5') == '<svg viewBox="0 0 5 5" width="5">'

    def test_does_not_match_suffix(self):
        tag = '<path id="p" d="M0 0"/>'
        assert set_attribute(tag, 'd', 'M1 1') == '<path id="p" d="M1 1"/>'

    def test_remove(self):
        assert remove_attribute('<svg width="10" height="20">', 'width') == '<svg height="20">'
        assert remove_attribute('<svg height="20">', 'width') == '<svg height="20">'


class TestScan:

    def test_viewport_and_declared_size(self):
        result = scan(svg('<path d="M0 0 L1 1"/>', 'viewBox="10, 20, 30, 40" width="30px" height="40"'))
        assert result.viewport == Viewport(10, 20, 30, 40)
        assert result.declared_width == '30px'
        assert result.declared_height == '40'

    def test_malformed_viewbox_is_none(self):
        assert scan(svg('', 'viewBox="0 0 100"')).viewport is None
        assert scan(svg('', 'viewBox="a b c d"')).viewport is None
        assert scan(svg('', '')).viewport is None

    @pytest.mark.parametrize('document', ['', '   ', 'not an svg', '<html></html>', None, 42])
    def test_no_root(self, document):
        with pytest.raises(MalformedDocumentError):
            scan(document)

    def test_collects_paths_in_document_order(self):
        result = scan(svg('<path d="M0 0 L1 1"/><g><path d="M2 2 L3 3"/></g>'))
        assert [r.data for r in result.geometry] == ['M0 0 L1 1', 'M2 2 L3 3']
        assert all(r.matrix == IDENTITY for r in result.geometry)

    def test_skips_empty_path_data(self):
        result = scan(svg('<path d=""/><path d="   "/><path fill="red"/>'))
        assert result.is_empty

    def test_nested_translations_accumulate(self, nested_groups_svg):
        record, = scan(nested_groups_svg).geometry
        assert record.matrix == (1, 0, 0, 1, 40, 60)

    def test_element_transform_applied_inside_group(self):
        doc = svg('<g transform="translate(10,0)"><path transform="scale(2)" d="M0 0 L1 1"/></g>')
        record, = scan(doc).geometry
        assert record.matrix == (2, 0, 0, 2, 10, 0)

    def test_group_transform_popped_on_close(self):
        doc = svg('<g transform="scale(3)"><path d="M0 0 L1 1"/></g><path d="M5 5 L6 6"/>')
        inner, outer = scan(doc).geometry
        assert inner.matrix == (3, 0, 0, 3, 0, 0)
        assert outer.matrix == IDENTITY

    def test_nested_svg_offsets_content(self):
        doc = svg('<svg x="10" y="5"><path d="M0 0 L1 1"/></svg>')
        record, = scan(doc).geometry
        assert record.matrix == (1, 0, 0, 1, 10, 5)

    @pytest.mark.parametrize('container', ['defs', 'clipPath', 'mask', 'filter', 'symbol', 'pattern', 'marker'])
    def test_non_visual_container_excluded(self, container):
        doc = svg(f'<{container} id="x"><path d="M0 0 L500 500"/></{container}><path d="M10 10 L20 20"/>')
        assert [r.data for r in scan(doc).geometry] == ['M10 10 L20 20']

    def test_non_visual_exclusion_at_any_depth(self):
        doc = svg('<defs><g><clipPath id="c"><g><path d="M0 0 L500 500"/></g></clipPath></g>'
                  '<path d="M0 0 L600 600"/></defs><path d="M10 10 L20 20"/>')
        assert [r.data for r in scan(doc).geometry] == ['M10 10 L20 20']

    def test_self_closing_containers_do_not_push(self):
        doc = svg('<defs/><g transform="scale(5)"/><path d="M10 10 L20 20"/>')
        record, = scan(doc).geometry
        assert record.matrix == IDENTITY

    def test_unbalanced_close_tags_tolerated(self):
        doc = svg('</g></defs></g><path d="M10 10 L20 20"/>')
        record, = scan(doc).geometry
        assert record.matrix == IDENTITY

    def test_comments_ignored(self):
        doc = svg('<!-- <path d="M0 0 L1000 1000"/> --><path d="M1 1 L2 2"/>')
        assert len(scan(doc).geometry) == 1

    def test_image_becomes_rectangle(self):
        doc = svg('<image x="5" y="6" width="10" height="20" href="a.png"/>')
        record, = scan(doc).geometry
        assert record.tag == 'image'
        assert record.data == 'M5 6 H15 V26 H5 Z'

    @pytest.mark.parametrize('size', ['width="0" height="10"', 'width="10" height="-1"',
                                      'width="10"', 'width="50%" height="10"'])
    def test_image_without_positive_size_ignored(self, size):
        assert scan(svg(f'<image {size} href="a.png"/>')).is_empty

    def test_group_transform_flag(self, clip_path_svg, offset_svg):
        assert scan(clip_path_svg).has_group_transforms
        assert not scan(offset_svg).has_group_transforms

    def test_raw_document_kept(self, offset_svg):
        assert scan(offset_svg).raw_document == offset_svg


class TestHasGroupTransforms:

    def test_group_transform(self):
        assert has_group_transforms(svg('<g transform="translate(1,1)"><path d="M0 0"/></g>'))

    def test_group_transform_inside_defs(self):
        assert has_group_transforms(svg('<defs><g transform="scale(2)"/></defs>'))

    def test_path_transform_only(self):
        assert not has_group_transforms(svg('<path transform="scale(2)" d="M0 0"/>'))

    def test_root_transform_ignored(self):
        assert not has_group_transforms(svg('<path d="M0 0"/>', 'transform="scale(2)"'))


def test_image_path_data_units():
    assert image_path_data({'width': '1in', 'height': '10px'}) == 'M0 0 H96 V10 H0 Z'


def test_image_with_relative_position_ignored():
    assert image_path_data({'width': '10', 'height': '10', 'x': '10%'}) is None
    assert image_path_data({'width': '10', 'height': '10', 'y': 'auto'}) is None
