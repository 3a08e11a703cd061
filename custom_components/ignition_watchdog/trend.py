"""Temperature trend detection for Ignition Watchdog."""
import logging

from .const import DECLINE_THRESHOLD, TREND_LOOKBACK
from .history import TemperatureHistory

_LOGGER = logging.getLogger(__name__)


class TrendDetector:
    """Decides whether the temperature is falling because ignition failed."""

    def __init__(self, decline_threshold: float = DECLINE_THRESHOLD, lookback: int = TREND_LOOKBACK) -> None:
        """Initialize the trend detector.

        Args:
            decline_threshold: Minimum drop in degrees that counts as a decline
            lookback: How many samples before the latest one to compare against
        """
        self.decline_threshold = decline_threshold
        self.lookback = lookback

    def is_declining(self, history: TemperatureHistory) -> bool:
        """Return True if the temperature dropped enough to act on.

        The latest sample is compared with the one taken `lookback` samples
        earlier, or with the oldest sample when the history is shorter. A
        lowered setpoint always wins: the drop is then expected.
        """
        samples = history.samples
        if len(samples) < 2:
            return False

        current = samples[-1]
        reference = samples[max(0, len(samples) - 1 - self.lookback)]

        if current.setpoint < reference.setpoint:
            _LOGGER.info(
                "Setpoint lowered (%s° → %s°) - temperature decline expected",
                reference.setpoint,
                current.setpoint,
            )
            return False

        delta = reference.temperature - current.temperature
        declining = delta >= self.decline_threshold

        if declining:
            _LOGGER.info(
                "Temperature declining: %s° → %s° (-%.1f°)",
                reference.temperature,
                current.temperature,
                delta,
            )

        return declining
