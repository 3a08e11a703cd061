"""Temperature history for Ignition Watchdog."""
from collections import deque
from datetime import datetime

from .const import HISTORY_SIZE
from .models import Sample


class TemperatureHistory:
    """Bounded, insertion-ordered record of recent temperature samples."""

    def __init__(self, max_size: int = HISTORY_SIZE) -> None:
        """Initialize an empty history keeping at most max_size samples."""
        self._samples: deque[Sample] = deque(maxlen=max_size)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def samples(self) -> tuple[Sample, ...]:
        """Return the samples, oldest first."""
        return tuple(self._samples)

    def record(self, temperature: float, setpoint: float, now: datetime) -> None:
        """Append a sample; the oldest one is dropped once the history is full."""
        self._samples.append(Sample(captured_at=now, temperature=temperature, setpoint=setpoint))

    def clear(self) -> None:
        """Forget all samples."""
        self._samples.clear()
