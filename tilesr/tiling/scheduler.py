"""
Batch scheduling over the (tile, augmentation) step space.

Every step pushes its PendingEntry onto a fixed-capacity FIFO before the batch
is submitted; draining pops the entries back in the same order, which is the
only thing tying backend output slot ``i`` to its tile and augmentation.
"""

import logging
import math
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import InferenceFailure
from .augmentation import TTA_SIZE
from .models import PendingEntry

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Phases of the step loop."""
    IDLE = "idle"
    FILLING = "filling"
    SUBMITTING = "submitting"
    DRAINING = "draining"
    COMPLETE = "complete"
    FAILED = "failed"


class PendingQueue:
    """
    Fixed-capacity ring buffer of PendingEntry values.

    Contract: push once per submitted step, pop once per drained slot.
    Overfilling or popping an empty queue means submission and draining
    went out of step and is an error.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: List[Optional[PendingEntry]] = [None] * capacity
        self._head = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def is_full(self) -> bool:
        return self._size == self.capacity

    def push(self, entry: PendingEntry) -> None:
        """Append an entry at the tail."""
        if self.is_full:
            raise OverflowError(f"pending queue is full ({self.capacity} entries)")
        self._items[(self._head + self._size) % self.capacity] = entry
        self._size += 1

    def peek(self) -> PendingEntry:
        """Return the head entry without removing it."""
        if self._size == 0:
            raise IndexError("peek from empty pending queue")
        return self._items[self._head]

    def pop(self) -> PendingEntry:
        """Remove and return the head entry."""
        entry = self.peek()
        self._items[self._head] = None
        self._head = (self._head + 1) % self.capacity
        self._size -= 1
        return entry

    def clear(self) -> None:
        """Drop all entries."""
        self._items = [None] * self.capacity
        self._head = 0
        self._size = 0


SampleFn = Callable[[PendingEntry], np.ndarray]
InferFn = Callable[[List[np.ndarray]], Sequence[np.ndarray]]
ConsumeFn = Callable[[PendingEntry, np.ndarray], None]
BatchDoneFn = Callable[[int, int], None]


class BatchScheduler:
    """
    Walks the step index space and groups steps into fixed-size batches.

    ``tile_index = step // steps_per_tile`` and
    ``augmentation_index = step % steps_per_tile``. The final batch is padded
    with zero-filled tiles whose entries are recognised while draining
    (``tile_index >= tile_count``) and discarded.

    Example:
        >>> scheduler = BatchScheduler(tile_count=5, batch_size=4, input_tile_shape=(64, 64, 3))
        >>> scheduler.batch_count, scheduler.step_count
        (2, 8)
    """

    def __init__(
        self,
        tile_count: int,
        batch_size: int,
        input_tile_shape: Tuple[int, ...],
        tta: bool = False,
        dtype=np.float32,
    ):
        """
        Initialize the scheduler.

        Args:
            tile_count: Number of real tiles
            batch_size: Fixed number of tiles per backend call
            input_tile_shape: Shape of a padding tile, (H, W, C)
            tta: Whether every tile is run under all 8 augmentations
            dtype: Element type of padding tiles
        """
        if tile_count < 0:
            raise ValueError(f"tile_count must be >= 0, got {tile_count}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        self.tile_count = tile_count
        self.batch_size = batch_size
        self.input_tile_shape = tuple(input_tile_shape)
        self.tta = tta
        self.dtype = dtype

        self.steps_per_tile = TTA_SIZE if tta else 1
        self.batch_count = math.ceil(tile_count * self.steps_per_tile / batch_size)
        self.step_count = self.batch_count * batch_size

        self.queue = PendingQueue(batch_size)
        self.state = SchedulerState.IDLE

    def entry_for_step(self, step: int) -> PendingEntry:
        """Map a step index to its (tile, augmentation) identity."""
        return PendingEntry(step // self.steps_per_tile, step % self.steps_per_tile)

    def is_padding(self, entry: PendingEntry) -> bool:
        """True for entries fabricated to fill the last batch."""
        return entry.tile_index >= self.tile_count

    def padding_tile(self) -> np.ndarray:
        """Zero-filled stand-in for a missing tile."""
        return np.zeros(self.input_tile_shape, dtype=self.dtype)

    def run(
        self,
        sample: SampleFn,
        infer: InferFn,
        consume: ConsumeFn,
        on_batch: Optional[BatchDoneFn] = None,
    ) -> int:
        """
        Drive every batch to completion.

        Args:
            sample: Produces the (augmented) input tile for a real entry
            infer: Runs one full batch synchronously
            consume: Receives every real entry with its output tile, in step order
            on_batch: Called with (batch_number, batch_count) after each batch

        Returns:
            Number of real entries consumed

        Raises:
            InferenceFailure: If a batch fails or returns the wrong number of tiles
        """
        consumed = 0
        batch: List[np.ndarray] = []
        self.queue.clear()

        try:
            for step in range(self.step_count):
                self.state = SchedulerState.FILLING
                entry = self.entry_for_step(step)
                self.queue.push(entry)

                if self.is_padding(entry):
                    batch.append(self.padding_tile())
                else:
                    batch.append(sample(entry))

                if step % self.batch_size != self.batch_size - 1:
                    continue

                self.state = SchedulerState.SUBMITTING
                outputs = infer(batch)
                if len(outputs) != self.batch_size:
                    raise InferenceFailure(
                        f"backend returned {len(outputs)} tiles for a batch of {self.batch_size}"
                    )

                self.state = SchedulerState.DRAINING
                consumed += self._drain(outputs, consume)
                batch = []

                if on_batch is not None:
                    on_batch(step // self.batch_size + 1, self.batch_count)
        except Exception:
            self.state = SchedulerState.FAILED
            raise

        self.state = SchedulerState.COMPLETE
        return consumed

    def _drain(self, outputs: Sequence[np.ndarray], consume: ConsumeFn) -> int:
        consumed = 0
        for output in outputs:
            entry = self.queue.pop()
            if self.is_padding(entry):
                # Only the last batch carries padding; nothing real follows it
                self.queue.clear()
                break
            consume(entry, output)
            consumed += 1
        return consumed
