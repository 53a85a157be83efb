"""
Error kinds raised by the tiling engine.

All of them are fatal to the current render call. Geometry and configuration
problems are raised before the inference backend is touched; backend failures
abort mid-render and leave the canvas in an undefined state.
"""


class TilingError(Exception):
    """Base class for all tiling engine errors."""


class InvalidGeometry(TilingError, ValueError):
    """Tiling parameters that cannot produce a converging tile grid."""


class InvalidRegion(TilingError, ValueError):
    """A sampling rectangle with no overlap with the source image."""


class ConfigurationMismatch(TilingError, ValueError):
    """Image or tile shapes that do not match the configured session."""


class InferenceFailure(TilingError, RuntimeError):
    """The inference backend failed to produce a batch."""
