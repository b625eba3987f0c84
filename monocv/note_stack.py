"""
Held-note bookkeeping for last-note priority.
"""
from typing import Iterator, List, Optional, Tuple


class NoteStack:
    """
    Notes currently held down, ordered by press recency (most recent last).

    A note appears at most once; pressing a held note again moves it to the top.
    """

    def __init__(self):
        self._notes: List[int] = []

    def press(self, note: int):
        """Push a note, moving it to the top if it is already held."""
        if note in self._notes:
            self._notes.remove(note)
        self._notes.append(note)

    def release(self, note: int) -> bool:
        """
        Remove a note by value.

        Returns:
            True if the note was held, False if it was not in the stack
        """
        if note in self._notes:
            self._notes.remove(note)
            return True
        return False

    def peek(self) -> Optional[int]:
        """Most recently pressed note still held, or None."""
        return self._notes[-1] if self._notes else None

    def clear(self):
        self._notes.clear()

    @property
    def notes(self) -> Tuple[int, ...]:
        return tuple(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note) -> bool:
        return note in self._notes

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._notes))

    def __repr__(self) -> str:
        return f"NoteStack({self._notes!r})"
