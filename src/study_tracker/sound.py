from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

# Peak gain of a tone at full volume
MASTER_GAIN = 0.3


@dataclass(frozen=True)
class Tone:
    frequency: float
    waveform: str
    duration: float
    offset: float
    gain: float


class ToneSink(Protocol):
    def play(self, tone: Tone) -> None: ...


class LoggingToneSink:
    def play(self, tone: Tone) -> None:
        logger.debug(
            "tone %.2fHz %s for %.1fs at +%.1fs gain=%.3f",
            tone.frequency,
            tone.waveform,
            tone.duration,
            tone.offset,
            tone.gain,
        )


class SoundService:
    def __init__(self, sink: ToneSink | None = None, volume: float = 0.5) -> None:
        self._sink = sink or LoggingToneSink()
        self.volume = 0.5
        self.set_volume(volume)

    def set_volume(self, value: float) -> None:
        self.volume = max(0.0, min(1.0, float(value)))

    def _tone(self, frequency: float, waveform: str, duration: float, offset: float = 0.0) -> None:
        if self.volume == 0:
            return
        try:
            self._sink.play(
                Tone(
                    frequency=frequency,
                    waveform=waveform,
                    duration=duration,
                    offset=offset,
                    gain=MASTER_GAIN * self.volume,
                )
            )
        except Exception:
            logger.exception("tone playback failed")

    def play_start(self) -> None:
        self._tone(440.0, "sine", 0.6)
        self._tone(554.37, "sine", 0.6, 0.1)

    def play_stop(self) -> None:
        self._tone(300.0, "triangle", 0.3)
        self._tone(150.0, "sine", 0.4)

    def play_alarm(self) -> None:
        # C major arpeggio
        self._tone(523.25, "sine", 1.5, 0.0)
        self._tone(659.25, "sine", 1.5, 0.2)
        self._tone(783.99, "sine", 2.0, 0.4)
        self._tone(1046.50, "sine", 2.5, 0.8)
