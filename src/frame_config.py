"""Immutable settings shared by the frame renderer and the player."""

import os
from dataclasses import dataclass


DEFAULT_PICS_DIR = "src/pics"
DEFAULT_FRAME_RATE = 30
DEFAULT_FONT_SIZE = 1
MAX_WORKERS = 32


@dataclass(frozen=True)
class FrameConfig:
    pics_dir: str = DEFAULT_PICS_DIR
    frame_rate: int = DEFAULT_FRAME_RATE
    font_size: int = DEFAULT_FONT_SIZE
    ordered: bool = True
    workers: int | None = None

    def __post_init__(self):
        if int(self.frame_rate) <= 0:
            raise ValueError(f"frame_rate must be positive, got {self.frame_rate}")
        if int(self.font_size) <= 0:
            raise ValueError(f"font_size must be positive, got {self.font_size}")
        if self.workers is not None and int(self.workers) <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    @property
    def scale_x(self):
        return self.font_size

    @property
    def scale_y(self):
        return self.font_size

    @property
    def frame_delay(self):
        """Seconds between two render launches."""
        return 1.0 / self.frame_rate

    def worker_count(self, frame_count):
        if self.workers is not None:
            return self.workers
        # One worker per frame, within reason.
        return max(1, min(frame_count, MAX_WORKERS, (os.cpu_count() or 1) * 4))
