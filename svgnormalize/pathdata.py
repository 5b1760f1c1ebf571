"""
Path data rewriting.

Applies an affine matrix to every coordinate of an SVG path "d" string.
Relative commands are resolved and written back as absolute commands.
"""

import math
import re

from .matrix import IDENTITY, is_identity, transform_point
from .units import NUMBER_RE, format_number, parse_numbers

COMMAND_RE = re.compile(r'([MLHVCSQTAZ])([^MLHVCSQTAZ]*)', re.IGNORECASE)

# Number of parameters consumed per repetition of each command
ARITY = {'M': 2, 'L': 2, 'T': 2, 'H': 1, 'V': 1, 'C': 6, 'S': 4, 'Q': 4, 'A': 7, 'Z': 0}

# Arc flags are single digits and may run into the next number: "0120" is 0, 1, 20
ARC_FLAG_RE = re.compile(r'[\s,]*([01])')
ARC_NUMBER_RE = re.compile(r'[\s,]*(' + NUMBER_RE.pattern + r')')


def _join(cmd, nums):
    return cmd + ' '.join(format_number(n) for n in nums)


def parse_arc_numbers(text):
    """Parameters of an arc command, reading the two flags one digit at a time."""
    nums = []
    pos = 0
    while True:
        pattern = ARC_FLAG_RE if len(nums) % 7 in (3, 4) else ARC_NUMBER_RE
        match = pattern.match(text, pos)
        if not match:
            return nums
        nums.append(float(match.group(1)))
        pos = match.end()


def transform_arc(rx, ry, rotation, matrix):
    """
    Map an arc's ellipse parameters through the linear part of matrix.

    Returns (rx, ry, rotation). The transformed ellipse is recovered from the
    eigen-decomposition of (L R D)(L R D)^T, where L is the matrix's linear
    part, R the arc rotation and D = diag(rx, ry).
    """
    a, b, c, d = matrix[:4]
    phi = math.radians(rotation)
    cos_p = math.cos(phi)
    sin_p = math.sin(phi)

    m00 = (a*cos_p + c*sin_p) * rx
    m10 = (b*cos_p + d*sin_p) * rx
    m01 = (-a*sin_p + c*cos_p) * ry
    m11 = (-b*sin_p + d*cos_p) * ry

    p = m00*m00 + m01*m01
    q = m00*m10 + m01*m11
    r = m10*m10 + m11*m11

    mean = (p + r) / 2
    radius = math.hypot((p - r) / 2, q)
    new_rx = math.sqrt(mean + radius)
    new_ry = math.sqrt(max(mean - radius, 0.0))
    new_rotation = math.degrees(0.5 * math.atan2(2*q, p - r))
    return new_rx, new_ry, new_rotation


def transform_path_d(d, matrix):
    """
    Transform path d attribute by applying matrix to all coordinates.
    Handles absolute and relative commands correctly.
    """
    if not d or not d.strip():
        return d

    a, b, c, d_m, e, f = matrix
    axis_aligned = b == 0 and c == 0
    linear_identity = is_identity((a, b, c, d_m, 0.0, 0.0))
    flips = a*d_m - b*c < 0

    result = []
    current_x, current_y = 0.0, 0.0
    start_x, start_y = 0.0, 0.0

    for cmd, params in COMMAND_RE.findall(d):
        cmd_upper = cmd.upper()
        is_relative = cmd.islower()

        if cmd_upper == 'Z':
            result.append('Z')
            current_x, current_y = start_x, start_y
            continue

        nums = parse_arc_numbers(params) if cmd_upper == 'A' else parse_numbers(params)
        arity = ARITY[cmd_upper]
        usable = len(nums) - len(nums) % arity
        transformed = []

        if cmd_upper in ('M', 'L', 'T'):
            for i in range(0, usable, 2):
                x, y = nums[i], nums[i+1]
                if is_relative:
                    x += current_x
                    y += current_y
                transformed.extend(transform_point(x, y, matrix))
                current_x, current_y = x, y
                if cmd_upper == 'M' and i == 0:
                    start_x, start_y = x, y
            if transformed:
                result.append(_join(cmd_upper, transformed))

        elif cmd_upper in ('H', 'V'):
            out_cmd = cmd_upper if axis_aligned else 'L'
            for value in nums:
                if cmd_upper == 'H':
                    current_x = value + current_x if is_relative else value
                else:
                    current_y = value + current_y if is_relative else value
                new_x, new_y = transform_point(current_x, current_y, matrix)
                if out_cmd == 'H':
                    transformed.append(new_x)
                elif out_cmd == 'V':
                    transformed.append(new_y)
                else:
                    transformed.extend([new_x, new_y])
            if transformed:
                result.append(_join(out_cmd, transformed))

        elif cmd_upper in ('C', 'S', 'Q'):
            for i in range(0, usable, arity):
                points = []
                for j in range(i, i + arity, 2):
                    x, y = nums[j], nums[j+1]
                    if is_relative:
                        x += current_x
                        y += current_y
                    points.append((x, y))
                for x, y in points:
                    transformed.extend(transform_point(x, y, matrix))
                current_x, current_y = points[-1]
            if transformed:
                result.append(_join(cmd_upper, transformed))

        elif cmd_upper == 'A':
            for i in range(0, usable, 7):
                rx, ry, rotation, large_arc, sweep, x, y = nums[i:i+7]
                if is_relative:
                    x += current_x
                    y += current_y
                nx, ny = transform_point(x, y, matrix)
                if not linear_identity:
                    rx, ry, rotation = transform_arc(abs(rx), abs(ry), rotation, matrix)
                if flips:
                    sweep = 1 - sweep
                transformed.extend([rx, ry, rotation, large_arc, sweep, nx, ny])
                current_x, current_y = x, y
            if transformed:
                result.append(_join('A', transformed))

    return ' '.join(result)


def absolute_path_d(d):
    """Rewrite d with absolute commands and separated arc flags."""
    return transform_path_d(d, IDENTITY)


def translate_path_d(d, dx, dy):
    return transform_path_d(d, (1.0, 0.0, 0.0, 1.0, dx, dy))
