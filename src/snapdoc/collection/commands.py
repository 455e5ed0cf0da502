"""
Module: collection.commands

Purpose:
    Edit commands for the page collection. Every user action becomes one
    command, applied atomically by PageCollection.apply().

Key Classes:
    - InsertEntries, RemoveEntry, MoveEntry, UpdateCaption, SetCaptionPending,
      CompleteCaption

Dependencies:
    - dataclasses (std)

Used By:
    - collection.manager: Command dispatch
    - captions.service: Caption results and pending flag
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .models import MoveDirection, PageEntry


@dataclass(frozen=True)
class InsertEntries:
    """Append fully constructed entries, in order."""

    entries: Tuple[PageEntry, ...]


@dataclass(frozen=True)
class RemoveEntry:
    """Remove an entry and release its preview."""

    entry_id: str


@dataclass(frozen=True)
class MoveEntry:
    """Swap the entry at ``index`` with its neighbour in ``direction``."""

    index: int
    direction: MoveDirection


@dataclass(frozen=True)
class UpdateCaption:
    """Replace an entry's caption verbatim."""

    entry_id: str
    text: str


@dataclass(frozen=True)
class SetCaptionPending:
    entry_id: str
    pending: bool


@dataclass(frozen=True)
class CompleteCaption:
    """Store a caption result and clear the pending flag in one step."""

    entry_id: str
    text: str


Command = Union[
    InsertEntries, RemoveEntry, MoveEntry, UpdateCaption, SetCaptionPending, CompleteCaption
]
