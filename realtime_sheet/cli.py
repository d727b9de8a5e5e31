"""Command-line interface for realtime-sheet.

Provides commands for:
- record: Live transcription from the microphone
- replay: Feed a recording through the live pipeline tick by tick
- pitch: Show the pitch nearest to a frequency
"""

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .core.constants import (
    DEFAULT_SR,
    DEFAULT_TEMPO,
    DEFAULT_TICK_HZ,
    DEFAULT_WINDOW_SIZE,
    MIN_NOTE_DURATION_MS,
    MIN_TEMPO,
    MAX_TEMPO,
)

app = typer.Typer(
    name="realtime-sheet",
    help="Live audio to sheet music transcription",
    rich_markup_mode="markdown",
)
console = Console()

ESTIMATORS = ("nsdf", "pyin")


def _setup_logging(verbose: bool) -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _check_tempo(tempo: float, allow_auto: bool = False) -> None:
    if allow_auto and tempo == 0:
        return
    if not MIN_TEMPO <= tempo <= MAX_TEMPO:
        console.print(
            f"[red]Error: tempo must be between {MIN_TEMPO:.0f} and {MAX_TEMPO:.0f} BPM[/red]"
        )
        raise typer.Exit(1)


def _make_estimator(name: str):
    from .analysis import NsdfPitchEstimator, PyinPitchEstimator

    name = name.lower()
    if name not in ESTIMATORS:
        console.print(f"[yellow]Unknown estimator '{name}', using 'nsdf'[/yellow]")
        name = "nsdf"
    return PyinPitchEstimator() if name == "pyin" else NsdfPitchEstimator()


def _status_line(session) -> Text:
    state = session.state.value.upper()
    current = session.current_note or "-"
    freq = f"{session.current_frequency:.1f} Hz" if session.current_frequency else ""
    context = session.context()
    return Text.assemble(
        (f"{state}", "bold green" if session.is_recording else "yellow"),
        f"  note: {current} {freq}",
        f"  volume: {session.volume:3d}",
        f"  notes: {len(session.notes)}",
        f"  key: {context.key_label}  time: {context.time_signature}",
    )


def _staff(session) -> Text:
    from .layout import TextStaffRenderer, render_staff

    return render_staff(TextStaffRenderer(), session.layout())


def _export(session, tempo: float, midi_out: Optional[Path], xml_out: Optional[Path]) -> None:
    from .output import MIDIExporter, MusicXMLExporter

    if not session.notes:
        if midi_out or xml_out:
            console.print("[yellow]No notes detected; nothing exported[/yellow]")
        return

    context = session.context()
    if midi_out is not None:
        MIDIExporter(tempo=tempo).export(session.notes, str(midi_out), context)
        console.print(f"[blue]MIDI written to:[/blue] {midi_out}")
    if xml_out is not None:
        MusicXMLExporter(tempo=tempo).export(session.notes, str(xml_out), context)
        console.print(f"[blue]MusicXML written to:[/blue] {xml_out}")


@app.command()
def record(
    tempo: float = typer.Option(
        DEFAULT_TEMPO, "-t", "--tempo", help="Tempo in BPM used to infer the meter"
    ),
    seconds: float = typer.Option(
        0.0, "-d", "--duration", help="Stop after this many seconds (0 = until Ctrl+C)"
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output MIDI file path"
    ),
    musicxml: Optional[Path] = typer.Option(
        None, "--musicxml", help="Output MusicXML file path"
    ),
    device: Optional[int] = typer.Option(
        None, "--device", help="Input device index (default: system default)"
    ),
    sample_rate: int = typer.Option(DEFAULT_SR, "--sample-rate", help="Capture sample rate"),
    estimator: str = typer.Option("nsdf", "-e", "--estimator", help="Pitch estimator: nsdf/pyin"),
    min_duration: float = typer.Option(
        MIN_NOTE_DURATION_MS, "--min-duration", help="Minimum note duration in ms"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Transcribe the microphone live. Press Ctrl+C to stop.

    **Examples:**

        realtime-sheet record

        realtime-sheet record -t 90 -o take.mid --musicxml take.musicxml
    """
    from .input import MicrophoneSource
    from .transcription import RecordingSession, SessionConfig

    _setup_logging(verbose)
    _check_tempo(tempo)

    session = RecordingSession(
        SessionConfig(tempo=tempo, min_note_duration_ms=min_duration),
        estimator=_make_estimator(estimator),
    )
    source = MicrophoneSource(
        sample_rate=sample_rate, window_size=DEFAULT_WINDOW_SIZE, device=device
    )

    if not session.start(source):
        console.print(f"[red]Error: {session.error}[/red]")
        raise typer.Exit(1)

    interval = 1.0 / DEFAULT_TICK_HZ
    started = time.monotonic()
    try:
        with Live(console=console, refresh_per_second=15, transient=False) as live:
            while session.is_recording:
                tick_start = time.monotonic()
                session.tick()
                live.update(Group(_status_line(session), _staff(session)))

                if seconds > 0 and tick_start - started >= seconds:
                    break
                time.sleep(max(0.0, interval - (time.monotonic() - tick_start)))
    except KeyboardInterrupt:
        pass
    finally:
        session.stop()

    console.print(f"[green]Recording stopped:[/green] {len(session.notes)} notes")
    _export(session, tempo, output, musicxml)


@app.command()
def replay(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, FLAC, MP3, ...)"),
    tempo: float = typer.Option(
        DEFAULT_TEMPO, "-t", "--tempo", help="Tempo in BPM. 0 = auto-detect"
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output MIDI file path"
    ),
    musicxml: Optional[Path] = typer.Option(
        None, "--musicxml", help="Output MusicXML file path"
    ),
    estimator: str = typer.Option("nsdf", "-e", "--estimator", help="Pitch estimator: nsdf/pyin"),
    min_duration: float = typer.Option(
        MIN_NOTE_DURATION_MS, "--min-duration", help="Minimum note duration in ms"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Replay a recording through the live pipeline at 60 ticks per second.

    Timing follows the file, not the wall clock, so replay is deterministic.

    **Examples:**

        realtime-sheet replay hum.wav

        realtime-sheet replay hum.wav -t 0 -o hum.mid
    """
    from .input import AudioLoader, ArraySource
    from .analysis import TempoAnalyzer
    from .transcription import RecordingSession, SessionConfig

    _setup_logging(verbose)
    _check_tempo(tempo, allow_auto=True)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    console.print(f"[blue]Loading audio:[/blue] {input_file}")
    loader = AudioLoader()
    try:
        audio, sr = loader.load(str(input_file))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if verbose:
        console.print(f"  Duration: {loader.get_duration(audio, sr):.2f}s, Sample rate: {sr}Hz")

    if tempo == 0:
        tempo = TempoAnalyzer().detect(audio, sr)
        console.print(f"  Detected tempo: {tempo:.1f} BPM")

    session = RecordingSession(
        SessionConfig(tempo=tempo, min_note_duration_ms=min_duration),
        estimator=_make_estimator(estimator),
    )
    session.start(ArraySource(audio, sr))

    console.print("[blue]Transcribing...[/blue]")
    while session.tick() is not None:
        pass
    session.stop()

    context = session.context()
    console.print(f"  Detected {len(session.notes)} notes")
    console.print(f"  Key: {context.key_label}, time signature: {context.time_signature}")

    if session.notes:
        _show_notes_table(session.notes[:20])
        if len(session.notes) > 20:
            console.print(f"   [dim]... and {len(session.notes) - 20} more notes[/dim]")
    console.print(_staff(session))

    _export(session, tempo, output, musicxml)


@app.command()
def pitch(
    frequency: float = typer.Argument(..., help="Frequency in Hz"),
):
    """Show the equal-tempered pitch nearest to a frequency."""
    from .analysis import frequency_to_pitch

    try:
        info = frequency_to_pitch(frequency)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"{frequency:.2f} Hz -> [cyan]{info.label}[/cyan] (MIDI {info.midi})")


def _show_notes_table(notes):
    """Display notes in a table."""
    table = Table(title="Detected Notes")
    table.add_column("Pitch", style="cyan")
    table.add_column("Frequency (Hz)", style="blue")
    table.add_column("Onset (ms)", style="green")
    table.add_column("Duration (ms)", style="yellow")
    table.add_column("Clarity", style="magenta")

    for note in notes:
        table.add_row(
            note.label,
            f"{note.frequency_hz:.1f}",
            f"{note.onset_ms:.0f}",
            f"{note.duration_ms:.0f}",
            f"{note.clarity:.2f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
