"""Undoable edits to transcribed lines."""

import logging
from abc import ABC, abstractmethod

from svaralekhini.lyrics.aligner import (
    Direction,
    initial_mapping,
    reconcile,
    relocate_syllable,
    smart_align,
)
from svaralekhini.types import Line

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 50


class EditCommand(ABC):
    """A reversible edit. ``revert`` undoes exactly what ``apply`` did."""

    name: str = "edit"

    @abstractmethod
    def apply(self) -> None:
        """Perform the edit."""

    @abstractmethod
    def revert(self) -> None:
        """Restore the state from before the last ``apply``."""


class LineEditCommand(EditCommand):
    """Edit of one line in a session's list of lines.

    The line is snapshotted on every ``apply`` and restored in place on
    ``revert``, so redo after undo replays against the current state.
    """

    def __init__(self, lines: list[Line], line_index: int):
        self.lines = lines
        self.line_index = line_index
        self._snapshot: Line | None = None

    @property
    def line(self) -> Line:
        if not 0 <= self.line_index < len(self.lines):
            raise IndexError(f"line {self.line_index} out of range ({len(self.lines)} lines)")
        return self.lines[self.line_index]

    def apply(self) -> None:
        line = self.line
        self._validate(line)
        self._snapshot = line.copy()
        self._edit(line)

    def revert(self) -> None:
        if self._snapshot is None:
            return
        line = self.line
        line.syllables = list(self._snapshot.syllables)
        line.notes = list(self._snapshot.notes)
        line.syllable_to_note_mapping = list(self._snapshot.syllable_to_note_mapping)
        self._snapshot = None

    def _validate(self, line: Line) -> None:
        pass

    @abstractmethod
    def _edit(self, line: Line) -> None:
        ...


class DeleteNoteCommand(LineEditCommand):
    """Remove a note slot, folding its duration into the previous real note."""

    name = "delete-note"

    def __init__(self, lines: list[Line], line_index: int, note_index: int):
        super().__init__(lines, line_index)
        self.note_index = note_index

    def _validate(self, line: Line) -> None:
        if not 0 <= self.note_index < len(line.notes):
            raise IndexError(f"note {self.note_index} out of range ({len(line.notes)} notes)")

    def _edit(self, line: Line) -> None:
        removed = line.notes.pop(self.note_index)

        if removed is not None:
            previous = next(
                (n for n in reversed(line.notes[:self.note_index]) if n is not None), None
            )
            following = next(
                (n for n in line.notes[self.note_index:] if n is not None), None
            )
            if previous is not None:
                previous.duration_ms += removed.duration_ms
            elif following is not None:
                # First note deleted: the next one starts earlier instead
                following.start_time_ms = removed.start_time_ms
                following.duration_ms += removed.duration_ms

        if not line.notes:
            line.syllable_to_note_mapping = [None] * len(line.syllables)
            return

        shifted = []
        for position in line.syllable_to_note_mapping:
            if position is not None and position > self.note_index:
                position -= 1
            elif position == self.note_index:
                position = max(0, position - 1)
            shifted.append(position)
        line.syllable_to_note_mapping = reconcile(shifted)
        line.pad_notes(max((p for p in line.syllable_to_note_mapping if p is not None), default=-1) + 1)


class InsertEmptySlotCommand(LineEditCommand):
    """Insert an empty note slot, pushing later syllables one slot right."""

    name = "insert-slot"

    def __init__(self, lines: list[Line], line_index: int, note_index: int):
        super().__init__(lines, line_index)
        self.note_index = note_index

    def _validate(self, line: Line) -> None:
        if not 0 <= self.note_index <= len(line.notes):
            raise IndexError(f"slot {self.note_index} out of range ({len(line.notes)} notes)")

    def _edit(self, line: Line) -> None:
        line.notes.insert(self.note_index, None)
        if all(p is None for p in line.syllable_to_note_mapping):
            # Line had no notes; the new slot gives the syllables somewhere to sit
            line.syllable_to_note_mapping = initial_mapping(len(line.notes), len(line.syllables))
            return
        line.syllable_to_note_mapping = [
            p + 1 if p is not None and p >= self.note_index else p
            for p in line.syllable_to_note_mapping
        ]
        line.pad_notes(max((p for p in line.syllable_to_note_mapping if p is not None), default=-1) + 1)


class RelocateSyllableCommand(LineEditCommand):
    """Move one syllable a single note position left or right."""

    name = "relocate"

    def __init__(
        self,
        lines: list[Line],
        line_index: int,
        syllable_index: int,
        direction: Direction | int,
    ):
        super().__init__(lines, line_index)
        self.syllable_index = syllable_index
        self.direction = Direction(direction)

    def _validate(self, line: Line) -> None:
        if not 0 <= self.syllable_index < len(line.syllables):
            raise IndexError(
                f"syllable {self.syllable_index} out of range ({len(line.syllables)} syllables)"
            )

    def _edit(self, line: Line) -> None:
        relocate_syllable(line, self.syllable_index, self.direction)


class SmartAlignCommand(LineEditCommand):
    """Replace a line with its duration-weighted alignment."""

    name = "smart-align"

    def _edit(self, line: Line) -> None:
        aligned = smart_align(line.syllables, line.notes)
        line.syllables = aligned.syllables
        line.notes = aligned.notes
        line.syllable_to_note_mapping = aligned.syllable_to_note_mapping


class EditHistory:
    """Bounded linear undo/redo stack.

    Executing a command discards anything that could have been redone.
    Past ``max_size`` entries the oldest command is forgotten.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_HISTORY):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._commands: list[EditCommand] = []
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._commands)

    def execute(self, command: EditCommand) -> None:
        command.apply()
        del self._commands[self._cursor:]
        self._commands.append(command)
        if len(self._commands) > self.max_size:
            self._commands.pop(0)
        self._cursor = len(self._commands)
        logger.debug(f"Executed {command.name} ({self._cursor}/{self.max_size})")

    def undo(self) -> bool:
        """Revert the most recent command. Returns False if there is none."""
        if not self.can_undo:
            return False
        self._cursor -= 1
        self._commands[self._cursor].revert()
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone command. Returns False if there is none."""
        if not self.can_redo:
            return False
        self._commands[self._cursor].apply()
        self._cursor += 1
        return True

    def clear(self) -> None:
        self._commands = []
        self._cursor = 0
