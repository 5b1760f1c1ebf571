"""
svgnormalize - move SVG content so its viewBox starts at (0, 0).

Crops whitespace around visible geometry, shifts coordinates to the origin
without breaking clip path, mask and filter references, and optimizes the
result.
"""

from .bounds import BoundingBox, compute_bounds, content_bounds
from .crop import crop_to_bounds, normalize_viewbox, set_viewbox
from .errors import (
    BoundsError,
    ConfigError,
    DegenerateBoundsError,
    EmptyGeometryError,
    GeometryError,
    MalformedDocumentError,
    OptimizationError,
    SingularMatrixError,
    StageWarning,
    SvgNormalizeError,
)
from .format import format_svg
from .geometry import PathGeometry
from .matrix import IDENTITY, AffineMatrix, multiply, parse_transform
from .optimize import OPTIMIZE_PLUGINS, PREPROCESS_PLUGINS, optimize, preprocess
from .process import PipelineState, ProcessingConfig, ProcessingReport, process
from .scanner import GeometryRecord, ScanResult, scan
from .transform import ShiftStrategy, normalize_to_origin, select_strategy
from .viewbox import Viewport, parse_viewbox

__version__ = '0.1.0'
