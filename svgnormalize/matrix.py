"""
Affine transform engine.

Matrices are six-tuples (a, b, c, d, e, f) representing:
    | a  c  e |
    | b  d  f |
    | 0  0  1 |
"""

import math
import re
from collections import namedtuple

from .errors import SingularMatrixError
from .units import format_number, parse_numbers

AffineMatrix = namedtuple('AffineMatrix', 'a b c d e f')

IDENTITY = AffineMatrix(1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

# Function names are case-sensitive; renderers ignore "Translate(...)"
TRANSFORM_RE = re.compile(r'\b(translate|scale|rotate|skewX|skewY|matrix)\s*\(([^)]*)\)')


# =============================================================================
# MATRIX MATH
# =============================================================================

def identity_matrix():
    return IDENTITY


def translation(dx, dy):
    return AffineMatrix(1.0, 0.0, 0.0, 1.0, float(dx), float(dy))


def multiply(m1, m2):
    """
    Multiply two transformation matrices.

    Result = m1 x m2 (m2 applied first, then m1). For a child element this is
    multiply(parent_accumulated, child_own).
    """
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2

    return AffineMatrix(
        a1*a2 + c1*b2,
        b1*a2 + d1*b2,
        a1*c2 + c1*d2,
        b1*c2 + d1*d2,
        a1*e2 + c1*f2 + e1,
        b1*e2 + d1*f2 + f1,
    )


def compose(matrices):
    """Multiply a sequence of matrices, outermost first."""
    result = IDENTITY
    for m in matrices:
        result = multiply(result, m)
    return result


def transform_point(x, y, matrix):
    """Transform a point (x, y) by the matrix."""
    a, b, c, d, e, f = matrix
    return (
        a*x + c*y + e,
        b*x + d*y + f
    )


def is_identity(matrix, tolerance=1e-12):
    return all(abs(v - i) <= tolerance for v, i in zip(matrix, IDENTITY))


def determinant(matrix):
    return matrix.a * matrix.d - matrix.b * matrix.c


def invert(matrix):
    """Return the inverse matrix; raises SingularMatrixError if there is none."""
    a, b, c, d, e, f = matrix
    det = a*d - b*c
    if abs(det) < 1e-12 or not math.isfinite(det):
        raise SingularMatrixError(f"matrix {tuple(matrix)} is not invertible")
    return AffineMatrix(
        d / det,
        -b / det,
        -c / det,
        a / det,
        (c*f - d*e) / det,
        (b*e - a*f) / det,
    )


def matrix_scale(matrix):
    """
    Extract approximate scale factors from a matrix.
    Returns (scale_x, scale_y) - useful for adjusting stroke-width.
    """
    a, b, c, d, e, f = matrix
    return math.hypot(a, b), math.hypot(c, d)


def format_translate(dx, dy):
    return f'translate({format_number(dx)}, {format_number(dy)})'


# =============================================================================
# TRANSFORM PARSING
# =============================================================================

def _function_matrix(name, nums):
    name = name.lower()

    if name == 'translate':
        tx = nums[0] if len(nums) > 0 else 0.0
        ty = nums[1] if len(nums) > 1 else 0.0
        return translation(tx, ty)

    if name == 'scale':
        sx = nums[0] if len(nums) > 0 else 1.0
        sy = nums[1] if len(nums) > 1 else sx
        return AffineMatrix(sx, 0.0, 0.0, sy, 0.0, 0.0)

    if name == 'rotate':
        angle = math.radians(nums[0] if len(nums) > 0 else 0.0)
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        if len(nums) >= 3:
            # translate(cx, cy) rotate(angle) translate(-cx, -cy), expanded
            cx, cy = nums[1], nums[2]
            return AffineMatrix(cos_a, sin_a, -sin_a, cos_a,
                                cx - cos_a*cx + sin_a*cy,
                                cy - sin_a*cx - cos_a*cy)
        return AffineMatrix(cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)

    if name == 'skewx':
        angle = math.radians(nums[0] if len(nums) > 0 else 0.0)
        return AffineMatrix(1.0, 0.0, math.tan(angle), 1.0, 0.0, 0.0)

    if name == 'skewy':
        angle = math.radians(nums[0] if len(nums) > 0 else 0.0)
        return AffineMatrix(1.0, math.tan(angle), 0.0, 1.0, 0.0, 0.0)

    if name == 'matrix' and len(nums) >= 6:
        return AffineMatrix(*nums[:6])

    return IDENTITY


def parse_transform(transform_str):
    """
    Parse an SVG transform attribute string into a single composed matrix.
    Handles: translate, scale, rotate, skewX, skewY, matrix

    Functions compose left to right, so the first one listed is the
    outermost. Unrecognized functions and missing arguments never raise.
    """
    if not transform_str:
        return IDENTITY

    result = IDENTITY
    for func_name, params_str in TRANSFORM_RE.findall(transform_str):
        result = multiply(result, _function_matrix(func_name, parse_numbers(params_str)))
    return result
