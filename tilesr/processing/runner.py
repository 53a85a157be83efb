"""
Batch runner: renders image files through one shared tile session.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional, Callable

from ..imaging import from_float_rgb, read_image, to_float_rgb, write_image
from ..tiling.renderer import TileSession

logger = logging.getLogger(__name__)


@dataclass
class RunnerConfig:
    """
    Configuration for a batch run.

    Attributes:
        input_paths: List of input image paths or directories
        output_dir: Output directory; None writes next to each input
        output_suffix: Suffix appended to each output file stem
        recursive: Search directories recursively
    """
    input_paths: List[str] = field(default_factory=list)
    output_dir: Optional[str] = None
    output_suffix: str = "(upscaled)"
    recursive: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "input_paths": self.input_paths,
            "output_dir": self.output_dir,
            "output_suffix": self.output_suffix,
            "recursive": self.recursive,
        }


@dataclass
class BatchResult:
    """Result of batch rendering."""
    total_files: int
    successful: int
    failed: int
    total_time_ms: float
    results: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        return self.successful / self.total_files if self.total_files > 0 else 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_files": self.total_files,
            "successful": self.successful,
            "failed": self.failed,
            "total_time_ms": self.total_time_ms,
            "success_rate": self.success_rate,
            "results": self.results,
            "errors": self.errors,
        }


class UpscaleRunner:
    """
    Renders a list of image files and writes the upscaled results.

    A failing file is logged and recorded; the remaining files still run.

    Example:
        >>> session = TileSession(InterpolationBackend(scale=2), RenderConfig(scale=2))
        >>> runner = UpscaleRunner(RunnerConfig(output_dir="out"), session)
        >>> result = runner.run_batch(["image1.png", "image2.png"])
        >>> print(f"Rendered {result.successful}/{result.total_files}")
    """

    SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".tif", ".webp"}

    def __init__(
        self,
        config: Optional[RunnerConfig] = None,
        session: Optional[TileSession] = None,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ):
        """
        Initialize runner.

        Args:
            config: Runner configuration
            session: Tile session used for every file
            progress_callback: Callback for progress updates (current, total, filename)
        """
        if session is None:
            raise ValueError("UpscaleRunner needs a TileSession")
        self.config = config or RunnerConfig()
        self.session = session
        self.progress_callback = progress_callback

    def output_path_for(self, image_path: str) -> Path:
        """Where the rendered image for ``image_path`` is written."""
        src = Path(image_path)
        out_dir = Path(self.config.output_dir) if self.config.output_dir else src.parent
        return out_dir / f"{src.stem}{self.config.output_suffix}.png"

    def run_single(self, image_path: str) -> Dict[str, Any]:
        """
        Render a single image file.

        Args:
            image_path: Path to image file

        Returns:
            Dict describing the written output

        Raises:
            FileNotFoundError, OSError: On unreadable input or unwritable output
            TilingError: If rendering fails
        """
        start_time = time.time()

        image = read_image(image_path)
        canvas = self.session.render(to_float_rgb(image))
        output_path = write_image(self.output_path_for(image_path), from_float_rgb(canvas))

        stats = self.session.last_stats
        result = {
            "file": image_path,
            "output": output_path,
            "input_size": [int(image.shape[1]), int(image.shape[0])],
            "output_size": [int(canvas.shape[1]), int(canvas.shape[0])],
            "processing_time_ms": (time.time() - start_time) * 1000,
        }
        if stats is not None:
            result["stats"] = stats.to_dict()
        return result

    def run_batch(self, paths: Optional[List[str]] = None) -> BatchResult:
        """
        Render every image found under ``paths``.

        Args:
            paths: Files or directories (defaults to config.input_paths)

        Returns:
            BatchResult; failed files are listed in ``errors``
        """
        start_time = time.time()
        files = self._collect_files(paths or self.config.input_paths)
        batch = BatchResult(total_files=len(files), successful=0, failed=0, total_time_ms=0)

        if not files:
            logger.warning("No image files found")
            return batch

        for number, image_path in enumerate(files, start=1):
            if self.progress_callback:
                self.progress_callback(number, batch.total_files, image_path)

            try:
                batch.results.append(self.run_single(image_path))
            except Exception as e:
                logger.error(f"Error rendering {image_path}: {e}")
                batch.errors.append({"file": image_path, "errors": [str(e)]})
            else:
                logger.info(f"Rendered {image_path}")

        batch.successful = len(batch.results)
        batch.failed = len(batch.errors)
        batch.total_time_ms = (time.time() - start_time) * 1000
        return batch

    def _is_image(self, path: Path) -> bool:
        return path.is_file() and path.suffix.lower() in self.SUPPORTED_EXTENSIONS

    def _collect_files(self, paths: List[str]) -> List[str]:
        """Expand files and directories into a sorted, de-duplicated image list."""
        found = set()
        for path in map(Path, paths):
            if path.is_dir():
                candidates = path.rglob("*") if self.config.recursive else path.iterdir()
                found.update(str(p) for p in candidates if self._is_image(p))
            elif path.exists():
                if self._is_image(path):
                    found.add(str(path))
            else:
                logger.warning(f"Skipping missing path: {path}")
        return sorted(found)
