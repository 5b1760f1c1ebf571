"""
Main SVG processing pipeline.

    preprocess -> scan -> bounds -> crop -> normalize coordinates
        -> normalize viewBox -> optimize -> format

Failures before bounds exist end the run with succeeded=False and the
original document. After that, a failing stage is recorded as a warning and
the document from before that stage is carried forward.
"""

import dataclasses
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .bounds import BoundingBox, compute_bounds
from .crop import crop_to_bounds, normalize_viewbox
from .errors import BoundsError, ConfigError, MalformedDocumentError
from .format import format_svg
from .geometry import PathGeometry
from .optimize import OPTIMIZE_PLUGINS, optimize, preprocess
from .scanner import scan
from .transform import normalize_to_origin
from .viewbox import Viewport

log = logging.getLogger(__name__)

NOTHING_TO_PROCESS = 'No drawable geometry found - nothing to process'


class PipelineState(enum.Enum):
    PREPROCESSED = 'preprocessed'
    PARSED = 'parsed'
    BOUNDS_COMPUTED = 'bounds-computed'
    CROPPED = 'cropped'
    COORDINATES_NORMALIZED = 'coordinates-normalized'
    VIEWPORT_NORMALIZED = 'viewport-normalized'
    OPTIMIZED = 'optimized'
    FORMATTED = 'formatted'
    DONE = 'done'
    FAILED = 'failed'


@dataclass(frozen=True)
class ProcessingConfig:
    preprocess_shapes: bool = True
    crop_whitespace: bool = True
    normalize_coordinates: bool = True
    normalize_viewport: bool = True
    optimize: bool = True
    minify: bool = False

    ALIASES = {
        'preprocessShapes': 'preprocess_shapes',
        'cropWhitespace': 'crop_whitespace',
        'normalizeCoordinates': 'normalize_coordinates',
        'transformToOrigin': 'normalize_coordinates',
        'normalizeViewport': 'normalize_viewport',
        'normalizeViewBox': 'normalize_viewport',
    }

    @classmethod
    def from_mapping(cls, options):
        """Build a config from a partial mapping of snake_case or camelCase names."""
        fields = {f.name for f in dataclasses.fields(cls)}
        values = {}
        for key, value in (options or {}).items():
            name = cls.ALIASES.get(key, key)
            if name not in fields:
                raise ConfigError(f"Unknown processing option: {key}")
            if not isinstance(value, bool):
                raise ConfigError(f"Processing option {key} must be a boolean")
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class ProcessingReport:
    output_document: str
    succeeded: bool
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    original_byte_size: int
    output_byte_size: int
    viewport_before: Optional[Viewport]
    viewport_after: Optional[Viewport]
    bounds: Optional[BoundingBox] = None
    final_state: PipelineState = PipelineState.DONE

    def to_dict(self):
        return {
            'succeeded': self.succeeded,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'stats': {
                'originalSize': self.original_byte_size,
                'processedSize': self.output_byte_size,
                'viewBoxBefore': self.viewport_before.to_dict() if self.viewport_before else None,
                'viewBoxAfter': self.viewport_after.to_dict() if self.viewport_after else None,
                'bounds': self.bounds.to_dict() if self.bounds else None,
            },
            'state': self.final_state.value,
        }


def byte_size(document):
    return len(document.encode('utf-8', 'replace'))


class Pipeline:
    """State for a single processing run. Not reused across documents."""

    def __init__(self, document, config):
        self.original = document
        self.config = config
        self.engine = PathGeometry()
        self.errors = []
        self.warnings = []
        self.state = None
        self.viewport_before = None
        self.viewport = None
        self.bounds = None

    def warn(self, message):
        log.warning(message)
        self.warnings.append(message)

    def report(self, document, succeeded):
        return ProcessingReport(
            output_document=document,
            succeeded=succeeded,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            original_byte_size=byte_size(self.original),
            output_byte_size=byte_size(document),
            viewport_before=self.viewport_before,
            viewport_after=self.viewport,
            bounds=self.bounds,
            final_state=self.state,
        )

    def fail(self, message):
        log.error(message)
        self.errors.append(message)
        self.state = PipelineState.FAILED
        return self.report(self.original, succeeded=False)

    def run(self):
        config = self.config
        document = self.original
        log.info("Input size: %d bytes", byte_size(document))

        if config.preprocess_shapes:
            try:
                document = preprocess(document)
                self.state = PipelineState.PREPROCESSED
            except Exception as e:
                self.warn(f"Preprocessing failed: {e}")
                document = self.original

        try:
            parsed = scan(document)
        except MalformedDocumentError as e:
            return self.fail(f"Processing failed: {e}")
        self.state = PipelineState.PARSED
        self.viewport_before = parsed.viewport
        self.viewport = parsed.viewport
        log.info("Original viewBox: %s", parsed.viewport)

        if parsed.is_empty:
            self.warn(NOTHING_TO_PROCESS)
            self.state = PipelineState.DONE
            return self.report(self.original, succeeded=True)

        try:
            self.bounds = compute_bounds(parsed.geometry, engine=self.engine, warnings=self.warnings)
        except BoundsError as e:
            return self.fail(f"Failed to calculate bounds: {e}")
        self.state = PipelineState.BOUNDS_COMPUTED
        log.info("Content bounds: %s", self.bounds.to_viewport())

        if self.viewport is None or not self.viewport.is_valid:
            self.viewport = self.bounds.to_viewport()

        if config.crop_whitespace:
            try:
                document = crop_to_bounds(document, self.bounds)
                self.viewport = self.bounds.to_viewport()
                self.state = PipelineState.CROPPED
            except Exception as e:
                self.warn(f"Crop failed: {e}")

        if config.normalize_coordinates and not self.viewport.at_origin:
            try:
                document = normalize_to_origin(
                    document, self.viewport.origin, engine=self.engine, warnings=self.warnings)
                self.state = PipelineState.COORDINATES_NORMALIZED
            except Exception as e:
                self.warn(f"Coordinate normalization failed: {e}")

        if config.normalize_viewport:
            try:
                document = normalize_viewbox(document, self.viewport.width, self.viewport.height)
                self.viewport = Viewport(0.0, 0.0, self.viewport.width, self.viewport.height)
                self.state = PipelineState.VIEWPORT_NORMALIZED
            except Exception as e:
                self.warn(f"Viewport normalization failed: {e}")

        if config.optimize:
            try:
                document = optimize(document, OPTIMIZE_PLUGINS)
                self.state = PipelineState.OPTIMIZED
            except Exception as e:
                self.warn(f"Optimization failed: {e}")

        try:
            document = format_svg(document, minify=config.minify)
            self.state = PipelineState.FORMATTED
        except Exception as e:
            self.warn(f"Formatting failed: {e}")

        self.state = PipelineState.DONE
        log.info("Final viewBox: %s", self.viewport)
        log.info("Output size: %d bytes", byte_size(document))
        return self.report(document, succeeded=True)


def process(document, config=None):
    """
    Run the full pipeline over an SVG string.

    Never raises: failures are reported through ProcessingReport.errors.
    config may be a ProcessingConfig, a partial mapping of options, or None
    for the defaults.
    """
    if not isinstance(document, str):
        return ProcessingReport(
            output_document='',
            succeeded=False,
            errors=(f"Processing failed: document must be a string, not {type(document).__name__}",),
            warnings=(),
            original_byte_size=0,
            output_byte_size=0,
            viewport_before=None,
            viewport_after=None,
            final_state=PipelineState.FAILED,
        )

    pipeline = None
    try:
        if not isinstance(config, ProcessingConfig):
            config = ProcessingConfig.from_mapping(config)
        pipeline = Pipeline(document, config)
        return pipeline.run()
    except Exception as e:
        log.exception("Unexpected error while processing")
        return ProcessingReport(
            output_document=document,
            succeeded=False,
            errors=(f"Processing failed: {e}",),
            warnings=tuple(pipeline.warnings) if pipeline else (),
            original_byte_size=byte_size(document),
            output_byte_size=byte_size(document),
            viewport_before=pipeline.viewport_before if pipeline else None,
            viewport_after=None,
            final_state=PipelineState.FAILED,
        )
