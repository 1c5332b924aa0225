"""Command-line interface for Melody Studio.

Provides commands for:
- analyze: Detect the notes of a hummed or sung recording
- styles: List the style presets
- export-mix: Render the edited vocal through the effects chain
- piano: Render the edited melody as piano with accompaniment
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .core import (
    EditableNote,
    MelodyStudioError,
    ProgressCallback,
    StudioSettings,
    midi_to_name,
)

app = typer.Typer(
    name="melody-studio",
    help="Hum a melody, edit its notes, and render it back as a vocal mix or piano",
    rich_markup_mode="markdown",
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@contextmanager
def _progress(description: str) -> Iterator[ProgressCallback]:
    """Rich progress bar driven by a [0, 1] callback."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=1.0)

        def update(value: float) -> None:
            progress.update(task, completed=value)

        yield update


def _load_session(
    input_file: Path,
    settings_file: Optional[Path],
    style: Optional[str],
    quantize: bool = False,
    optimize: bool = False,
    intensity: Optional[float] = None,
):
    """Analyse ``input_file`` and apply settings, style, quantize and AI passes."""
    from .session import StudioSession

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    session = StudioSession()
    with _progress("Analyzing") as update:
        session.load(str(input_file), progress=update)

    try:
        if settings_file is not None:
            session.apply_settings(StudioSettings.from_json(str(settings_file)))
        if style:
            session.apply_style(style)
            console.print(f"  Style: {session.state.style_id}")
    except (KeyError, ValueError) as e:
        console.print(f"[red]Invalid settings: {e}[/red]")
        raise typer.Exit(1)
    if quantize:
        session.quantize()
    if optimize:
        session.optimize(intensity)
        console.print(f"  AI optimized (intensity {session.state.ai_intensity:.2f})")

    console.print(
        f"  Duration: {session.state.duration:.2f}s, "
        f"{len(session.state.notes)} notes, "
        f"voiced {session.analysis.voiced_ratio:.0%}"
    )
    return session


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input recording (WAV, FLAC, MP3, M4A...)"),
    settings: Optional[Path] = typer.Option(
        None, "--settings", help="JSON settings file (bpm, scale, style, trim...)"
    ),
    style: Optional[str] = typer.Option(
        None, "-s", "--style", help="Apply a style preset (id or display name)"
    ),
    quantize: bool = typer.Option(
        False, "-q", "--quantize", help="Snap notes to the grid and scale"
    ),
    midi: Optional[Path] = typer.Option(
        None, "--midi", help="Also write the edited notes as a MIDI file"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Detect the notes of a monophonic recording.

    **Examples:**

        melody-studio analyze hum.wav

        melody-studio analyze hum.wav --style lofi_chill -q --midi hum.mid
    """
    _configure_logging(verbose)
    try:
        session = _load_session(input_file, settings, style, quantize=quantize)

        if midi is not None:
            session.export_midi(str(midi))
            if not json_output:
                console.print(f"[blue]MIDI written to:[/blue] {midi}")

        if json_output:
            state = session.state
            console.print_json(
                data={
                    "input": str(input_file),
                    "duration": state.duration,
                    "voiced_ratio": session.analysis.voiced_ratio,
                    "bpm": state.bpm,
                    "scale": state.scale.name,
                    "style": state.style_id,
                    "global_shift": state.global_shift,
                    "average_shift_cents": session.effective_average_shift_cents,
                    "notes": [
                        {
                            "id": n.id,
                            "start": n.start_time,
                            "end": n.end_time,
                            "detected_midi": n.detected_midi,
                            "semitone_offset": n.semitone_offset,
                            "name": session.note_name(n.id),
                        }
                        for n in state.notes
                    ],
                    "waveform": [float(v) for v in session.analysis.waveform],
                }
            )
        elif session.state.notes:
            _show_notes_table(session.state.notes, session.state.global_shift)
        else:
            console.print("[yellow]No pitched content detected[/yellow]")
    except MelodyStudioError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def styles():
    """List the available style presets."""
    from .style import STYLE_PROFILES

    table = Table(title="Style Presets")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Settings", style="yellow")
    table.add_column("Progression", style="magenta")
    table.add_column("Tone Chain", style="blue")

    for profile in STYLE_PROFILES.values():
        table.add_row(
            profile.id,
            profile.name,
            profile.summary,
            profile.progression_text,
            profile.tone_chain,
        )

    console.print(table)


@app.command("export-mix")
def export_mix(
    input_file: Path = typer.Argument(..., help="Input recording"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output audio file (default: <input>_mix.wav)"
    ),
    settings: Optional[Path] = typer.Option(None, "--settings", help="JSON settings file"),
    style: Optional[str] = typer.Option(None, "-s", "--style", help="Apply a style preset"),
    quantize: bool = typer.Option(False, "-q", "--quantize", help="Snap notes to the grid and scale"),
    optimize: bool = typer.Option(False, "--ai", help="Run AI optimization before rendering"),
    intensity: Optional[float] = typer.Option(
        None, "--intensity", min=0.0, max=1.0, help="AI optimization intensity (0-1)"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Render the edited vocal with pitch shifts and effects.

    **Examples:**

        melody-studio export-mix hum.wav -s edm_pulse --ai -o hum_edm.wav
    """
    _configure_logging(verbose)
    if output is None:
        output = input_file.with_name(f"{input_file.stem}_mix.wav")

    try:
        session = _load_session(input_file, settings, style, quantize, optimize, intensity)
        segments = session.render_segments()
        console.print(f"  Rendering {len(segments)} segments")
        with _progress("Rendering mix") as update:
            path = session.export_mix(str(output), progress=update)
    except MelodyStudioError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Mix exported:[/green] {path}")


@app.command()
def piano(
    input_file: Path = typer.Argument(..., help="Input recording"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output audio file (default: <input>_piano.wav)"
    ),
    settings: Optional[Path] = typer.Option(None, "--settings", help="JSON settings file"),
    style: Optional[str] = typer.Option(None, "-s", "--style", help="Apply a style preset"),
    quantize: bool = typer.Option(True, "--quantize/--no-quantize", "-q/-Q", help="Snap notes to the grid and scale"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Render the melody as piano over a style's chord progression.

    **Examples:**

        melody-studio piano hum.wav -s pop_fresh -o hum_piano.wav
    """
    _configure_logging(verbose)
    if output is None:
        output = input_file.with_name(f"{input_file.stem}_piano.wav")

    try:
        session = _load_session(input_file, settings, style, quantize)
        with _progress("Synthesizing piano") as update:
            path = session.export_piano(str(output), progress=update)
    except MelodyStudioError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Piano exported:[/green] {path}")


def _show_notes_table(notes: List[EditableNote], global_shift: int = 0):
    """Display notes in a table."""
    table = Table(title="Detected Notes")
    table.add_column("#", style="dim")
    table.add_column("Pitch", style="cyan")
    table.add_column("Start (s)", style="green")
    table.add_column("Duration (s)", style="yellow")
    table.add_column("Offset", style="magenta")

    for idx, note in enumerate(notes, 1):
        table.add_row(
            str(idx),
            midi_to_name(note.output_midi + global_shift),
            f"{note.start_time:.3f}",
            f"{note.duration:.3f}",
            f"{note.semitone_offset:+d}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
