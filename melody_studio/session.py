"""Studio session - the small mutable object a front end drives.

The session owns the current StudioState, the snapshot store and the last
analysis result. Each operation replaces ``state`` with a new value computed
by the pure functions in the style/render/synthesis layers; jobs receive
copies, so they can run in a background thread while the front end keeps
reading the session.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .core import (
    AISoloMode,
    AnalysisConfig,
    InputUnreadable,
    ProgressCallback,
    QuantizeUnit,
    RenderConfig,
    RenderSegment,
    ScalePreset,
    StudioSettings,
    midi_to_name,
)
from .core.state import StudioState
from .output import MIDIExporter
from .processing import clamp_bpm
from .render import (
    ExportRequest,
    SegmentRenderer,
    beautify_correction_cents,
    build_render_segments,
    effective_average_shift_cents,
)
from .style import (
    AISnapshot,
    SnapshotStore,
    apply_style,
    clear_note_offsets,
    get_style,
    optimize,
    quantize_state,
)
from .synthesis import PianoRequest, PianoSynthesizer, clip_notes_to_range
from .transcription import AnalysisResult, MonophonicTranscriber

logger = logging.getLogger(__name__)


class StudioSession:
    """One recording being edited."""

    def __init__(
        self,
        analysis_config: Optional[AnalysisConfig] = None,
        render_config: Optional[RenderConfig] = None,
    ):
        self.analysis_config = analysis_config or AnalysisConfig()
        self.render_config = render_config or RenderConfig()
        self.state = StudioState()
        self.snapshots = SnapshotStore(history_limit=self.render_config.history_limit)
        self.analysis: Optional[AnalysisResult] = None
        self.source_path: Optional[str] = None

    # Loading and analysis

    def load(self, path: str, progress: Optional[ProgressCallback] = None) -> AnalysisResult:
        """Analyse a recording and make it the session's source."""
        result = MonophonicTranscriber(self.analysis_config).analyze_file(path, progress=progress)
        self.attach(result, path)
        return result

    def attach(self, result: AnalysisResult, path: Optional[str] = None) -> None:
        """Replace notes and trim with a fresh analysis; keeps style settings."""
        self.analysis = result
        self.source_path = path
        state = self.state.copy()
        state.notes = [n.copy() for n in result.notes]
        state.duration = result.duration
        state.trim_start = 0.0
        state.trim_end = result.duration
        self.state = state
        self.snapshots.clear()

    def apply_settings(self, settings: StudioSettings) -> None:
        """Apply a front end's plain-value settings."""
        state = self.state.copy()
        state.bpm = float(settings.bpm)
        state.quantize_unit = QuantizeUnit.parse(settings.quantize_unit)
        state.scale = ScalePreset.parse(settings.scale)
        state.style_id = get_style(settings.style).id
        state.tempo = float(settings.tempo)
        state.beautify = bool(settings.beautify)
        state.ai_intensity = float(settings.ai_intensity)
        state.ai_rhythm = bool(settings.ai_rhythm)
        state.ai_tone = bool(settings.ai_tone)
        state.ai_space = bool(settings.ai_space)
        state.solo_mode = AISoloMode.parse(settings.ai_solo_mode)
        self.state = state
        if settings.trim_start is not None or settings.trim_end is not None:
            self.set_trim(
                settings.trim_start if settings.trim_start is not None else state.trim_start,
                settings.trim_end if settings.trim_end is not None else state.trim_end,
            )
        pin = settings.pinned_snapshot_id
        if pin is not None and pin != self.snapshots.pinned_id:
            self.snapshots.toggle_pin(pin)

    def set_trim(self, start: float, end: float) -> None:
        state = self.state.copy()
        state.trim_start = max(0.0, min(start, state.duration))
        state.trim_end = max(state.trim_start, min(end, state.duration))
        self.state = state

    # Note editing

    def set_note_offset(self, note_id: str, offset: int) -> None:
        state = self.state.copy()
        state.notes = [n.with_offset(offset) if n.id == note_id else n for n in state.notes]
        self.state = state

    def quantize(self) -> None:
        self.state = quantize_state(self.state)

    def clear_offsets(self) -> None:
        self.state = clear_note_offsets(self.state)

    def apply_style(self, style_id: str) -> None:
        self.state = apply_style(self.state, style_id)

    # Optimisation and snapshots

    def optimize(self, intensity: Optional[float] = None) -> AISnapshot:
        before = self.state
        after = optimize(before, intensity)
        snapshot = self.snapshots.record_optimization(before, after)
        self.state = after
        return snapshot

    def save_snapshot(self, label: Optional[str] = None) -> AISnapshot:
        return self.snapshots.save(self.state, label)

    def toggle_ab(self) -> bool:
        """Swap original/optimised. Returns True when now showing the original."""
        self.state = self.snapshots.toggle_ab(self.state)
        return self.snapshots.showing_original

    def apply_snapshot(self, snapshot_id: int) -> None:
        self.state = self.snapshots.apply(snapshot_id, self.state)

    def toggle_pin(self, snapshot_id: int) -> Optional[int]:
        return self.snapshots.toggle_pin(snapshot_id)

    def clear_snapshots(self) -> None:
        self.snapshots.clear()

    # Rendering

    @property
    def base_cents(self) -> float:
        """Beautify correction, or 0 when beautify is off or nothing was analysed."""
        if not self.state.beautify or self.analysis is None:
            return 0.0
        return beautify_correction_cents(self.analysis.pitch_track)

    @property
    def effective_average_shift_cents(self) -> float:
        return effective_average_shift_cents(
            self.state.notes, self.base_cents, self.state.global_shift
        )

    def render_segments(self) -> List[RenderSegment]:
        start, end = self.state.trim_range
        return build_render_segments(
            self.state.notes,
            start,
            end,
            self.state.duration,
            base_cents=self.base_cents,
            global_shift=self.state.global_shift,
        )

    def _require_source(self) -> str:
        if self.source_path is None:
            raise InputUnreadable("No recording loaded")
        return self.source_path

    def build_export_request(self, output_path: str) -> ExportRequest:
        """
        Freeze the current state into an ExportRequest.

        A pinned snapshot is substituted into the session first, so the
        export (and the session afterwards) reflect the pinned version.
        """
        source = self._require_source()
        pinned = self.snapshots.pinned()
        if pinned is not None:
            logger.info("Exporting pinned snapshot %r", pinned.label)
            self.state = pinned.restore(self.state)

        s = self.state
        return ExportRequest(
            source_path=source,
            output_path=str(output_path),
            segments=tuple(self.render_segments()),
            tempo=s.tempo,
            beautify=s.beautify,
            reverb_mix=s.reverb_mix,
            bpm=s.bpm,
            ai_enabled=s.ai_enabled,
            ai_tone=s.ai_tone,
            ai_space=s.ai_space,
            effects=s.effects,
            solo_mode=s.solo_mode,
        )

    def export_mix(self, output_path: str, progress: Optional[ProgressCallback] = None) -> Path:
        request = self.build_export_request(output_path)
        return SegmentRenderer(self.render_config.sample_rate).render(request, progress)

    def build_piano_request(self, output_path: str) -> PianoRequest:
        """
        Raises:
            EmptyEditRange: If no note lies inside the trim range
        """
        self._require_source()
        s = self.state
        start, end = s.trim_range
        notes, duration = clip_notes_to_range(s.notes, start, end, s.duration)
        return PianoRequest(
            notes=tuple(notes),
            duration=duration,
            bpm=s.bpm,
            scale=s.scale,
            style=get_style(s.style_id),
            global_shift=s.global_shift,
            output_path=str(output_path),
        )

    def export_piano(self, output_path: str, progress: Optional[ProgressCallback] = None) -> Path:
        request = self.build_piano_request(output_path)
        synth = PianoSynthesizer(self.render_config.sample_rate, self.render_config.piano_tail)
        return synth.render(request, progress)

    def export_midi(self, output_path: str) -> Path:
        """Write the edited notes (with global shift) as a MIDI file."""
        MIDIExporter(tempo=clamp_bpm(self.state.bpm)).export(
            self.state.notes, output_path, global_shift=self.state.global_shift
        )
        return Path(output_path)

    def note_name(self, note_id: str) -> str:
        """Display name of a note's output pitch, including the global shift."""
        for note in self.state.notes:
            if note.id == note_id:
                return midi_to_name(note.output_midi + self.state.global_shift)
        raise KeyError(note_id)
