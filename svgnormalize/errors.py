"""
Exception types raised by svgnormalize.

Errors raised before content bounds exist are fatal to a pipeline run.
Everything raised by later stages derives from StageWarning and is recorded
as a warning in the report instead.
"""


class SvgNormalizeError(Exception):
    """Base class for all svgnormalize errors."""


class MalformedDocumentError(SvgNormalizeError):
    """No root <svg> element could be located."""


class BoundsError(SvgNormalizeError):
    """Content bounds could not be computed."""


class EmptyGeometryError(BoundsError):
    """Bounds were requested for an empty geometry set."""


class DegenerateBoundsError(BoundsError):
    """No finite bounding box could be produced."""


class GeometryError(SvgNormalizeError):
    """The geometry engine could not handle a single path."""


class SingularMatrixError(SvgNormalizeError):
    """A transform matrix has no inverse."""


class ConfigError(SvgNormalizeError, ValueError):
    """Invalid processing configuration or plugin name."""


class StageWarning(SvgNormalizeError):
    """A post-bounds stage failed; the run continues without it."""


class OptimizationError(StageWarning):
    """The optimizer could not rewrite the markup."""
