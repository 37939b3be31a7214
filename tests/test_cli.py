"""Tests for the CLI."""

from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import scipy.io.wavfile as wavfile

from svaralekhini.cli import main, parse_args

SR = 44100


def _write_tone(path: Path, freqs, seconds: float = 0.6) -> Path:
    t = np.arange(int(SR * seconds)) / SR
    samples = np.concatenate([0.5 * np.sin(2 * np.pi * f * t) for f in freqs])
    wavfile.write(str(path), SR, (samples * 32767).astype(np.int16))
    return path


class TestParseArgs:
    def test_transcribe_defaults(self):
        args = parse_args(["transcribe", "song.wav"])
        assert args.command == "transcribe"
        assert args.input_file == "song.wav"
        assert args.tonic == 261.63
        assert args.tuning == "carnatic"
        assert args.min_note_ms == 150
        assert args.stabilizer == "withhold"
        assert args.short_notes == "merge"
        assert args.midi is True
        assert args.smart_align is False
        assert args.output_dir == "./svaralekhini-output"

    def test_transcribe_flags(self):
        args = parse_args([
            "transcribe", "song.wav", "--tuning", "western", "--no-midi",
            "--short-notes", "rest", "--lyrics", "words.txt", "--language", "telugu",
        ])
        assert args.tuning == "western"
        assert args.midi is False
        assert args.short_notes == "rest"
        assert args.lyrics == Path("words.txt")
        assert args.language == "telugu"

    def test_map_frequencies(self):
        args = parse_args(["map", "440", "261.63", "--tuning", "western"])
        assert args.frequencies == [440.0, 261.63]

    def test_no_command_exits(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_bad_tuning_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["map", "440", "--tuning", "hindustani"])


class TestMain:
    def test_dispatch_transcribe(self):
        with patch("svaralekhini.cli._run_transcribe") as run:
            main(["transcribe", "song.wav"])
        run.assert_called_once()

    def test_dispatch_map(self):
        with patch("svaralekhini.cli._run_map") as run:
            main(["map", "440"])
        run.assert_called_once()


class TestMapCommand:
    def test_carnatic(self, capsys):
        main(["map", "392.445", "523.26"])
        out = capsys.readouterr().out.splitlines()
        assert out[0].startswith("392.445 Hz: Pa (octave +0) ✓")
        assert out[1].startswith("523.26 Hz: Sa\u0307 (octave +1) ✓")

    def test_western_cents(self, capsys):
        main(["map", "446", "--tuning", "western"])
        assert "A (octave +0) +23¢" in capsys.readouterr().out

    def test_non_positive_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["map", "0"])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_invalid_tonic_exits(self, capsys):
        with pytest.raises(SystemExit):
            main(["map", "440", "--tonic", "-5"])
        assert "tonic_hz" in capsys.readouterr().err


class TestTranscribeCommand:
    def test_missing_input(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["transcribe", str(tmp_path / "missing.wav")])
        assert exc.value.code == 1
        assert "file not found" in capsys.readouterr().err

    def test_writes_outputs(self, tmp_path, capsys):
        wav = _write_tone(tmp_path / "sa_pa.wav", [261.63, 392.445])
        lyrics = tmp_path / "lyrics.txt"
        lyrics.write_text("sa pa\n", encoding="utf-8")
        out_dir = tmp_path / "out"
        session = tmp_path / "session.json"

        main([
            "transcribe", str(wav), "--output-dir", str(out_dir),
            "--lyrics", str(lyrics), "--save-session", str(session),
        ])

        text = (out_dir / "sa_pa.txt").read_text(encoding="utf-8")
        assert "Style: carnatic" in text
        assert "sa: Sa" in text
        assert "pa: Pa" in text
        assert (out_dir / "sa_pa.mid").exists()
        assert session.exists()
        assert "Transcribed 1 line(s)" in capsys.readouterr().out

    def test_no_midi(self, tmp_path):
        wav = _write_tone(tmp_path / "sa.wav", [261.63])
        main(["transcribe", str(wav), "--output-dir", str(tmp_path), "--no-midi"])
        assert (tmp_path / "sa.txt").exists()
        assert not (tmp_path / "sa.mid").exists()

    def test_smart_align(self, tmp_path):
        wav = _write_tone(tmp_path / "sa_pa.wav", [261.63, 392.445])
        lyrics = tmp_path / "lyrics.txt"
        lyrics.write_text("sa pa", encoding="utf-8")
        main([
            "transcribe", str(wav), "--output-dir", str(tmp_path), "--no-midi",
            "--lyrics", str(lyrics), "--smart-align",
        ])
        text = (tmp_path / "sa_pa.txt").read_text(encoding="utf-8")
        assert "sa: Sa" in text
        assert "pa: Pa" in text
