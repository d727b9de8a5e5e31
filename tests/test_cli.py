"""Tests for the command-line interface."""

import numpy as np
import soundfile as sf
from typer.testing import CliRunner

from realtime_sheet.cli import app

runner = CliRunner()


def write_tone(path, seconds: float = 0.6, sr: int = 22050):
    t = np.arange(int(sr * seconds)) / sr
    tone = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    audio = np.concatenate([tone, np.zeros(sr // 4)]).astype(np.float32)
    sf.write(str(path), audio, sr)


class TestPitchCommand:
    def test_known_pitch(self):
        result = runner.invoke(app, ["pitch", "440"])
        assert result.exit_code == 0
        assert "A4" in result.output
        assert "MIDI 69" in result.output

    def test_invalid_frequency(self):
        result = runner.invoke(app, ["pitch", "0"])
        assert result.exit_code == 1


class TestReplayCommand:
    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["replay", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_replay_exports(self, tmp_path):
        wav = tmp_path / "hum.wav"
        midi = tmp_path / "hum.mid"
        xml = tmp_path / "hum.musicxml"
        write_tone(wav)

        result = runner.invoke(
            app, ["replay", str(wav), "-o", str(midi), "--musicxml", str(xml)]
        )
        assert result.exit_code == 0, result.output
        assert "A4" in result.output
        assert midi.exists()
        assert xml.exists()

    def test_tempo_out_of_range(self, tmp_path):
        wav = tmp_path / "hum.wav"
        write_tone(wav)
        result = runner.invoke(app, ["replay", str(wav), "-t", "500"])
        assert result.exit_code == 1
