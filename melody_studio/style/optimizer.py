"""AI optimisation - map one intensity value onto rhythm, tone and space."""

import logging
from dataclasses import replace
from typing import Optional

from .engine import apply_pattern_offsets, quantize_state, swing_state
from .profiles import get_style
from ..core.state import NEUTRAL_TONE, EffectParameters, StudioState

logger = logging.getLogger(__name__)

MAX_SWING = 0.28
MAX_REVERB = 45.0
PATTERN_INTENSITY = 0.55


def derive_tone_parameters(intensity: float) -> EffectParameters:
    """High-pass, presence and drive for the tone category."""
    return EffectParameters(
        high_pass_hz=45 + 110 * intensity,
        presence_gain=1.5 + 5.5 * intensity,
        drive=26 * intensity,
    )


def derive_space_parameters(intensity: float, current_reverb: float):
    """Return (reverb_mix, delay_mix) for the space category."""
    reverb = min(MAX_REVERB, max(current_reverb, 12 + 28 * intensity))
    delay = 4 + 18 * intensity
    return reverb, delay


def optimize(state: StudioState, intensity: Optional[float] = None) -> StudioState:
    """
    Run one optimisation pass over a copy of ``state``.

    Args:
        state: Current studio state (not modified)
        intensity: Overrides ``state.ai_intensity`` when given; clamped to [0, 1]

    Returns:
        Optimised state with ``ai_enabled`` set
    """
    new = state.copy()
    if intensity is not None:
        new.ai_intensity = intensity
    level = min(max(new.ai_intensity, 0.0), 1.0)
    new.ai_intensity = level
    new.ai_enabled = True

    if new.ai_rhythm and new.notes:
        new = quantize_state(new)
        new.swing = min(MAX_SWING, max(new.swing, 0.04 + 0.22 * level))
        new = swing_state(new)
        if level > PATTERN_INTENSITY:
            new.notes = apply_pattern_offsets(new.notes, get_style(new.style_id).note_pattern)

    if new.ai_tone:
        tone = derive_tone_parameters(level)
    else:
        tone = NEUTRAL_TONE
    effects = replace(
        new.effects,
        high_pass_hz=tone.high_pass_hz,
        presence_gain=tone.presence_gain,
        drive=tone.drive,
    )

    if new.ai_space:
        new.reverb_mix, delay_mix = derive_space_parameters(level, new.reverb_mix)
        effects = replace(effects, delay_mix=delay_mix)
    else:
        effects = replace(effects, delay_mix=0.0)
    new.effects = effects

    logger.info(
        "Optimised at intensity %.2f: rhythm=%s tone=%s space=%s",
        level, new.ai_rhythm, new.ai_tone, new.ai_space,
    )
    return new
