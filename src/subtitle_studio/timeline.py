"""Committed cue sequence plus the single in-progress draft."""

from __future__ import annotations

import logging
from typing import Sequence

from .errors import IndexOutOfRange
from .models import Cue

logger = logging.getLogger(__name__)


def effective_cues(
    committed: Sequence[Cue], draft: Cue, edit_target: int | None
) -> list[Cue]:
    """
    Cues shown in live preview.

    While an existing cue is being edited the draft replaces it only on
    commit, so the preview shows the committed set alone. While creating a
    new cue the draft is appended as long as it has visible text.
    """
    if edit_target is not None:
        return list(committed)
    if draft.is_blank:
        return list(committed)
    return [*committed, draft]


class TimelineModel:
    """Owns the committed cues (insertion order) and the draft slot."""

    def __init__(self, cues: Sequence[Cue] | None = None) -> None:
        self._cues: list[Cue] = list(cues or [])
        self._draft: Cue = Cue.blank()
        self._edit_target: int | None = None

    @property
    def cues(self) -> tuple[Cue, ...]:
        return tuple(self._cues)

    @property
    def draft(self) -> Cue:
        return self._draft

    @property
    def edit_target(self) -> int | None:
        return self._edit_target

    def __len__(self) -> int:
        return len(self._cues)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._cues):
            raise IndexOutOfRange(index, len(self._cues))

    def add_cue(self, cue: Cue) -> int:
        self._cues.append(cue)
        logger.debug("Added cue %d: %s", len(self._cues) - 1, cue.label())
        return len(self._cues) - 1

    def update_cue(self, index: int, cue: Cue) -> None:
        self._check_index(index)
        self._cues[index] = cue

    def delete_cue(self, index: int) -> Cue:
        self._check_index(index)
        return self._cues.pop(index)

    def begin_edit(self, index: int) -> None:
        self._check_index(index)
        self._edit_target = index
        self._draft = self._cues[index]

    def cancel_edit(self) -> None:
        self._edit_target = None
        self._draft = Cue.blank()

    def set_draft(self, cue: Cue) -> None:
        self._draft = cue

    def commit_draft(self) -> int | None:
        """
        Write the draft into the committed sequence.

        Returns the index written, or None when a blank new-cue draft was
        discarded.
        """
        if self._edit_target is not None:
            index = self._edit_target
            self.update_cue(index, self._draft)
            self.cancel_edit()
            return index

        written: int | None = None
        if not self._draft.is_blank:
            written = self.add_cue(self._draft)
        self._draft = Cue.blank()
        return written

    def effective_cues(self) -> list[Cue]:
        return effective_cues(self._cues, self._draft, self._edit_target)
