"""MIDI export of edited notes."""

import pretty_midi
from typing import List
from pathlib import Path

from ..core import EditableNote, RenderTargetUnwritable


class MIDIExporter:
    """Export edited notes to MIDI format."""

    def __init__(
        self,
        tempo: float = 100.0,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
        velocity: int = 96,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
            velocity: Velocity given to every note
        """
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program
        self.velocity = velocity

    def export(self, notes: List[EditableNote], output_path: str, global_shift: int = 0) -> None:
        """
        Export notes to MIDI file.

        Args:
            notes: Edited notes (their output pitch is written)
            output_path: Path to output MIDI file
            global_shift: Extra transposition in semitones
        """
        midi = self.notes_to_pretty_midi(notes, global_shift)

        try:
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)
            midi.write(str(output_path))
        except OSError as e:
            raise RenderTargetUnwritable(f"Cannot write {output_path}: {e}") from e

    def notes_to_pretty_midi(self, notes: List[EditableNote], global_shift: int = 0) -> pretty_midi.PrettyMIDI:
        """Convert notes to PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        for note in notes:
            pitch = int(round(note.output_midi + global_shift))
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=self.velocity,
                    pitch=max(0, min(127, pitch)),
                    start=note.start_time,
                    end=note.end_time,
                )
            )

        midi.instruments.append(instrument)
        return midi
