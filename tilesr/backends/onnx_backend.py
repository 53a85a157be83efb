"""
ONNX Runtime inference backend.

The model must have exactly one NCHW float input and one NCHW float output.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

import numpy as np

from ..errors import InferenceFailure
from .base import InferenceBackend, Shape

logger = logging.getLogger(__name__)


def blob_from_tiles(tiles: Sequence[np.ndarray]) -> np.ndarray:
    """
    Pack HWC tiles into one contiguous NCHW float32 blob.

    Args:
        tiles: Tiles of identical shape (H, W, C)

    Returns:
        Array of shape (N, C, H, W)
    """
    batch = np.stack([np.asarray(tile, dtype=np.float32) for tile in tiles])
    return np.ascontiguousarray(batch.transpose(0, 3, 1, 2))


def tiles_from_blob(blob: np.ndarray) -> List[np.ndarray]:
    """
    Unpack an NCHW blob into a list of HWC float32 tiles.

    Args:
        blob: Array of shape (N, C, H, W)

    Returns:
        N arrays of shape (H, W, C)
    """
    if blob.ndim != 4:
        raise InferenceFailure(f"output blob must have 4 dims, got {blob.ndim}")
    hwc = np.asarray(blob, dtype=np.float32).transpose(0, 2, 3, 1)
    return [np.ascontiguousarray(tile) for tile in hwc]


def _static_dim(dim: Any) -> Optional[int]:
    """Model dims are ints when fixed and strings/None when dynamic."""
    return dim if isinstance(dim, int) and dim > 0 else None


class OnnxBackend(InferenceBackend):
    """
    Runs an ONNX image-to-image model through onnxruntime.

    Example:
        >>> with OnnxBackend("models/swin_unet/art/scale2x.onnx", device_id=0) as backend:
        ...     backend.configure((256, 256, 3), backend.native_output_shape((256, 256, 3)), 4)
        ...     outputs = backend.run_batch(tiles)
    """

    name = "onnx"

    def __init__(
        self,
        model_path: str,
        device_id: int = 0,
        providers: Optional[List[str]] = None,
        session: Optional[Any] = None,
    ):
        """
        Initialize the backend.

        Args:
            model_path: Path to the .onnx model
            device_id: CUDA device index for the CUDA execution provider
            providers: Explicit onnxruntime providers (default: CUDA, then CPU)
            session: Pre-built session exposing get_inputs/get_outputs/run
        """
        super().__init__()
        self.model_path = str(model_path)
        self.device_id = device_id
        self.providers = providers
        self._session = session

    @property
    def session(self) -> Any:
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def _create_session(self) -> Any:
        import onnxruntime as ort

        if not Path(self.model_path).is_file():
            raise FileNotFoundError(f"Model not found: {self.model_path}")

        providers = self.providers or [
            ("CUDAExecutionProvider", {"device_id": self.device_id}),
            "CPUExecutionProvider",
        ]
        available = set(ort.get_available_providers())
        providers = [
            p for p in providers
            if (p[0] if isinstance(p, tuple) else p) in available
        ]

        logger.info(f"Loading {self.model_path} with providers {providers}")
        return ort.InferenceSession(self.model_path, providers=providers)

    def _io(self):
        inputs = self.session.get_inputs()
        outputs = self.session.get_outputs()
        if len(inputs) != 1 or len(outputs) != 1:
            raise InferenceFailure(
                f"model has invalid number of IO tensors: expected 1 input and 1 output, "
                f"got {len(inputs)} and {len(outputs)}"
            )
        for tensor in (inputs[0], outputs[0]):
            if len(tensor.shape) != 4:
                raise InferenceFailure(
                    f"model tensor {tensor.name!r} has invalid shape: expected 4 dims, "
                    f"got {len(tensor.shape)}"
                )
        return inputs[0], outputs[0]

    def native_output_shape(self, input_tile_shape: Shape) -> Shape:
        _, output = self._io()
        _, channels, height, width = (_static_dim(d) for d in output.shape)
        if channels and height and width:
            return (height, width, channels)

        # Dynamic spatial dims: probe with a single blank tile
        probe = np.zeros((1,) + tuple(input_tile_shape), dtype=np.float32)
        result = self._run(blob_from_tiles(probe))
        _, channels, height, width = result.shape
        return (height, width, channels)

    def configure(self, input_tile_shape: Shape, output_tile_shape: Shape, batch_size: int) -> bool:
        try:
            model_input, _ = self._io()
        except InferenceFailure as e:
            logger.error(str(e))
            return False

        height, width, channels = input_tile_shape
        requested = (batch_size, channels, height, width)
        for axis, (model_dim, wanted) in enumerate(zip(model_input.shape, requested)):
            fixed = _static_dim(model_dim)
            if fixed is not None and fixed != wanted:
                logger.error(
                    f"Model input dim {axis} is fixed to {fixed}, cannot configure {wanted}"
                )
                return False

        self._store_shapes(input_tile_shape, output_tile_shape, batch_size)
        return True

    def _run(self, blob: np.ndarray) -> np.ndarray:
        model_input, model_output = self._io()
        try:
            result = self.session.run([model_output.name], {model_input.name: blob})[0]
        except Exception as e:
            raise InferenceFailure(f"Engine inference failed: {e}") from e
        return np.asarray(result)

    def run_batch(self, tiles: Sequence[np.ndarray]) -> List[np.ndarray]:
        self.validate_batch(tiles)
        outputs = tiles_from_blob(self._run(blob_from_tiles(tiles)))
        self.validate_outputs(outputs)
        return outputs

    def close(self) -> None:
        self._session = None
        super().close()
