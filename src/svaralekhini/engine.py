"""Per-frame pitch-to-notation pipeline and session state.

One call to ``process_frame`` runs a full cycle synchronously: extract a
pitch, reject out-of-band and noisy frames, stabilize, map to a scale
degree and feed the note segmenter. Rejected frames are skipped silently.
"""

import logging
from collections import deque
from dataclasses import asdict, dataclass, field

import numpy as np

from svaralekhini.analysis import iter_frames
from svaralekhini.lyrics.aligner import build_line
from svaralekhini.lyrics.history import EditCommand, EditHistory
from svaralekhini.lyrics.syllables import split_lines, split_syllables
from svaralekhini.notation.scale import ScaleMapper, get_mapper
from svaralekhini.notation.segmenter import DEFAULT_MIN_NOTE_MS, NoteSegmenter, ShortNotePolicy
from svaralekhini.pitch.extractor import extract_pitch
from svaralekhini.pitch.noise import NoiseClassifier
from svaralekhini.pitch.stabilizer import PitchStabilizer, StabilizerMode
from svaralekhini.types import FrameResult, Language, Line, PitchSample, TuningSystem

logger = logging.getLogger(__name__)

DEFAULT_TONIC_HZ = 261.63
MIN_FREQUENCY_HZ = 80.0
MAX_FREQUENCY_HZ = 2000.0
NOISE_HISTORY_SIZE = 16
DEFAULT_LINE_GAP_MS = 1500


@dataclass
class EngineConfig:
    """Session-wide settings, fixed for the duration of a session."""
    tonic_hz: float = DEFAULT_TONIC_HZ
    tuning: TuningSystem = TuningSystem.CARNATIC
    min_note_duration_ms: int = DEFAULT_MIN_NOTE_MS
    stabilizer_mode: StabilizerMode = StabilizerMode.WITHHOLD
    short_note_policy: ShortNotePolicy = ShortNotePolicy.MERGE
    min_frequency_hz: float = MIN_FREQUENCY_HZ
    max_frequency_hz: float = MAX_FREQUENCY_HZ

    def __post_init__(self):
        self.tuning = TuningSystem(self.tuning)
        self.stabilizer_mode = StabilizerMode(self.stabilizer_mode)
        self.short_note_policy = ShortNotePolicy(self.short_note_policy)
        if self.tonic_hz <= 0:
            raise ValueError(f"tonic_hz must be positive, got {self.tonic_hz}")
        if self.min_note_duration_ms < 0:
            raise ValueError(f"min_note_duration_ms cannot be negative, got {self.min_note_duration_ms}")
        if not 0 < self.min_frequency_hz < self.max_frequency_hz:
            raise ValueError(
                f"invalid frequency band {self.min_frequency_hz}-{self.max_frequency_hz} Hz"
            )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["tuning"] = self.tuning.value
        data["stabilizer_mode"] = self.stabilizer_mode.value
        data["short_note_policy"] = self.short_note_policy.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class SessionState:
    """Everything a session mutates. Owned by a single caller thread."""
    stabilizer: PitchStabilizer
    segmenter: NoteSegmenter
    mapper: ScaleMapper
    noise: NoiseClassifier = field(default_factory=NoiseClassifier)
    history: deque = field(default_factory=lambda: deque(maxlen=NOISE_HISTORY_SIZE))
    language: Language = Language.ENGLISH
    lyric_lines: list[list[str]] = field(default_factory=list)
    lines: list[Line] = field(default_factory=list)
    current_line_index: int = 0
    edits: EditHistory = field(default_factory=EditHistory)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "SessionState":
        return cls(
            stabilizer=PitchStabilizer(mode=config.stabilizer_mode),
            segmenter=NoteSegmenter(policy=config.short_note_policy),
            mapper=get_mapper(config.tuning),
        )

    @property
    def current_syllables(self) -> list[str]:
        if 0 <= self.current_line_index < len(self.lyric_lines):
            return self.lyric_lines[self.current_line_index]
        return []

    def reset_line(self) -> None:
        self.stabilizer.reset()
        self.segmenter.reset()
        self.history.clear()


def process_frame(
    frame: np.ndarray,
    sample_rate: int,
    timestamp_ms: int,
    config: EngineConfig,
    state: SessionState,
) -> FrameResult | None:
    """Run one analysis cycle. Returns None when the frame is rejected."""
    frequency = extract_pitch(frame, sample_rate)
    if frequency is None:
        return None

    if not config.min_frequency_hz <= frequency <= config.max_frequency_hz:
        logger.debug(f"{timestamp_ms}ms: {frequency:.1f} Hz outside valid band")
        return None

    if state.noise.is_noise(frequency, frame, state.history):
        logger.debug(f"{timestamp_ms}ms: {frequency:.1f} Hz rejected as noise")
        return None

    stable = state.stabilizer.stabilize(frequency)
    if stable is None:
        return None

    degree = state.mapper.map(stable, config.tonic_hz)
    state.history.append(PitchSample(frequency_hz=stable, scale_degree=degree, timestamp_ms=timestamp_ms))

    note = state.segmenter.push(
        degree, timestamp_ms, pitch_hz=stable, min_duration_ms=config.min_note_duration_ms,
    )
    return FrameResult(frequency_hz=stable, scale_degree=degree, note=note)


def finish_line(config: EngineConfig, state: SessionState, end_ms: int | None = None) -> Line:
    """Close the current line: flush the open note, map syllables, advance.

    The line is appended to ``state.lines`` and per-line pitch state is
    reset. The lyric cursor stops on the last lyric line.
    """
    state.segmenter.flush(end_ms, min_duration_ms=config.min_note_duration_ms)
    notes = list(state.segmenter.notes)
    line = build_line(list(state.current_syllables), notes)
    state.lines.append(line)
    logger.info(
        f"Line {len(state.lines)}: {len(notes)} notes, {len(line.syllables)} syllables"
    )

    state.reset_line()
    if state.current_line_index < len(state.lyric_lines) - 1:
        state.current_line_index += 1
    return line


def load_lyrics(state: SessionState, text: str, language: Language | str = Language.ENGLISH) -> int:
    """Split lyric text into per-line syllables. Returns the number of lines."""
    state.language = Language(language)
    state.lyric_lines = [split_syllables(line, state.language) for line in split_lines(text)]
    state.current_line_index = 0
    logger.info(f"Loaded {len(state.lyric_lines)} lyric lines ({state.language.value})")
    return len(state.lyric_lines)


def execute_edit(state: SessionState, command: EditCommand) -> bool:
    """Apply an edit through the history. Out-of-range edits are ignored."""
    try:
        state.edits.execute(command)
    except IndexError as e:
        logger.warning(f"Ignoring {command.name}: {e}")
        return False
    return True


def undo(state: SessionState) -> bool:
    return state.edits.undo()


def redo(state: SessionState) -> bool:
    return state.edits.redo()


def transcribe(
    samples: np.ndarray,
    sample_rate: int,
    config: EngineConfig,
    state: SessionState,
    frame_size: int = 2048,
    hop_size: int | None = None,
    line_gap_ms: int | None = DEFAULT_LINE_GAP_MS,
) -> list[Line]:
    """Drive the pipeline over a whole recording.

    An unvoiced stretch of at least ``line_gap_ms`` closes the current
    line; None disables gap splitting. The final line is always closed.
    Returns the lines finished by this call.
    """
    first = len(state.lines)
    last_voiced: int | None = None

    for timestamp_ms, frame in iter_frames(samples, sample_rate, frame_size, hop_size):
        result = process_frame(frame, sample_rate, timestamp_ms, config, state)
        if result is not None:
            last_voiced = timestamp_ms
            continue
        if (
            line_gap_ms is not None
            and last_voiced is not None
            and timestamp_ms - last_voiced >= line_gap_ms
        ):
            finish_line(config, state, end_ms=last_voiced)
            last_voiced = None

    if last_voiced is not None or not state.segmenter.is_idle or first == len(state.lines):
        finish_line(config, state, end_ms=last_voiced)
    return state.lines[first:]
