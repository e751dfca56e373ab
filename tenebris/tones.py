"""
Synthesized beeps used when a sound file is missing
"""

from typing import Tuple

# sound file -> (frequency Hz, duration s, waveform)
FALLBACK_TONES = {
    "hit.wav": (520, 0.07, "square"),
    "powerup.wav": (780, 0.09, "square"),
    "lose.wav": (160, 0.2, "square"),
    "win.wav": (660, 0.12, "sawtooth"),
    "eat.wav": (620, 0.06, "square"),
    "death.wav": (110, 0.25, "square"),
}
DEFAULT_TONE = (440, 0.07, "square")

# square waves at full volume are harsh
TONE_GAIN = 0.3


def tone_for(name: str) -> Tuple[int, float, str]:
    return FALLBACK_TONES.get(name, DEFAULT_TONE)


def fallback_tone(name: str):
    """Build a replayable pyglet source for the beep standing in for ``name``"""
    from pyglet.media import StaticSource, synthesis

    freq, duration, wave = tone_for(name)
    kind = synthesis.Sawtooth if wave == "sawtooth" else synthesis.Square
    return StaticSource(kind(duration, frequency=freq))
