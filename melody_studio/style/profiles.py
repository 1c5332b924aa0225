"""Style presets - named bundles of tempo, grid, scale and transforms."""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..core import QuantizeUnit, ScalePreset


@dataclass(frozen=True)
class StyleProfile:
    """An immutable style preset.

    ``chords_minor`` / ``chords_other`` are root-relative semitone offsets
    cycled once per beat by the piano accompaniment; which one applies
    depends on the session's scale.
    """

    id: str
    name: str
    bpm_range: Tuple[float, float]
    quantize_unit: QuantizeUnit
    scale: ScalePreset
    tempo_rate: float
    reverb_mix: float
    global_semitone_shift: int
    swing_amount: float
    note_pattern: Tuple[int, ...]
    chords_minor: Tuple[int, ...]
    chords_other: Tuple[int, ...]
    progression_text: str
    drum_pattern: str
    tone_chain: str
    beautify_by_default: bool = True

    @property
    def default_bpm(self) -> float:
        """Midpoint of the BPM range, rounded."""
        low, high = self.bpm_range
        return float(round((low + high) * 0.5))

    def chord_progression(self, scale: ScalePreset) -> Tuple[int, ...]:
        return self.chords_minor if scale is ScalePreset.MINOR else self.chords_other

    @property
    def summary(self) -> str:
        low, high = self.bpm_range
        return (
            f"速度 {int(low)}-{int(high)} BPM | 网格 {self.quantize_unit.value} | "
            f"音阶 {self.scale.value} | 摆动 {int(self.swing_amount * 100)}%"
        )


STYLE_PROFILES: Dict[str, StyleProfile] = {
    profile.id: profile
    for profile in (
        StyleProfile(
            id="pop_fresh",
            name="Pop清新",
            bpm_range=(96, 116),
            quantize_unit=QuantizeUnit.EIGHTH,
            scale=ScalePreset.MAJOR,
            tempo_rate=1.0,
            reverb_mix=14,
            global_semitone_shift=0,
            swing_amount=0.08,
            note_pattern=(0, 0, 2, 0, -1, 0, 1, 0),
            chords_minor=(0, 7, 9, 5),
            chords_other=(0, 7, 9, 5),
            progression_text="I - V - vi - IV",
            drum_pattern="四拍主鼓 + 反拍军鼓 + 闭镲八分",
            tone_chain="Bright EQ -> Light Comp -> Short Reverb",
        ),
        StyleProfile(
            id="lofi_chill",
            name="LoFi松弛",
            bpm_range=(72, 90),
            quantize_unit=QuantizeUnit.SIXTEENTH,
            scale=ScalePreset.MINOR,
            tempo_rate=0.92,
            reverb_mix=30,
            global_semitone_shift=-3,
            swing_amount=0.18,
            note_pattern=(-2, 0, -3, 0, -2, 0),
            chords_minor=(0, 10, 8, 5),
            chords_other=(0, 9, 7, 5),
            progression_text="i - bVII - bVI - V",
            drum_pattern="轻摇摆鼓点 + 软军鼓 + 颗粒噪声",
            tone_chain="Lowpass -> Tape Saturation -> Room Reverb",
        ),
        StyleProfile(
            id="edm_pulse",
            name="EDM能量",
            bpm_range=(124, 136),
            quantize_unit=QuantizeUnit.SIXTEENTH,
            scale=ScalePreset.MINOR,
            tempo_rate=1.08,
            reverb_mix=24,
            global_semitone_shift=5,
            swing_amount=0.04,
            note_pattern=(0, 7, 12, 7, 0, 7),
            chords_minor=(0, 8, 3, 10),
            chords_other=(0, 5, 9, 7),
            progression_text="i - bVI - bIII - bVII",
            drum_pattern="四踩地板 + 开镲上扬 + clap层叠",
            tone_chain="Exciter -> Comp -> Hall Reverb",
        ),
        StyleProfile(
            id="rnb_soul",
            name="R&B氛围",
            bpm_range=(82, 102),
            quantize_unit=QuantizeUnit.EIGHTH,
            scale=ScalePreset.MINOR,
            tempo_rate=0.98,
            reverb_mix=20,
            global_semitone_shift=-2,
            swing_amount=0.14,
            note_pattern=(0, -2, 0, 2, -1, 1),
            chords_minor=(2, 7, 0, 9),
            chords_other=(2, 7, 0, 9),
            progression_text="ii - V - I - vi",
            drum_pattern="半拍律动 + 切分kick + 细腻打击乐",
            tone_chain="Warm EQ -> Slow Comp -> Plate Reverb",
        ),
    )
}


def get_style(key: str) -> StyleProfile:
    """Look up a style by id or display name."""
    if key in STYLE_PROFILES:
        return STYLE_PROFILES[key]
    for profile in STYLE_PROFILES.values():
        if profile.name == key:
            return profile
    raise KeyError(f"Unknown style {key!r}. Available: {', '.join(STYLE_PROFILES)}")
