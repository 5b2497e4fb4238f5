"""Pure note logic - lifecycle transitions, filtering and tag menus.

A note's lifecycle is a single tagged state, so archived/trashed/starred
cannot contradict each other:

    Active(starred) --archive--> Archived --archive--> Active(False)
    Active/Archived --trash--> Trashed --trash--> deleted
    Trashed --restore--> Active(False)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from .timestamps import parse_timestamp

FILTER_ALL = "all"
FILTER_STARRED = "starred"
FILTER_ARCHIVED = "archived"
FILTER_TRASH = "trash"
BUILTIN_FILTERS = (FILTER_ALL, FILTER_STARRED, FILTER_ARCHIVED, FILTER_TRASH)


@dataclass(frozen=True)
class Active:
    starred: bool = False


@dataclass(frozen=True)
class Archived:
    pass


@dataclass(frozen=True)
class Trashed:
    pass


NoteState = Active | Archived | Trashed


def parse_tags(text: str | None) -> frozenset[str]:
    """Parse a comma-separated tag field into lowercase labels."""
    if not text:
        return frozenset()
    return frozenset(t.strip().lower() for t in text.split(",") if t.strip())


@dataclass(frozen=True)
class Note:
    """A markdown note."""

    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    tags: frozenset[str] = field(default_factory=frozenset)
    state: NoteState = field(default_factory=Active)

    @property
    def is_starred(self) -> bool:
        return isinstance(self.state, Active) and self.state.starred

    @property
    def is_archived(self) -> bool:
        return isinstance(self.state, Archived)

    @property
    def is_trashed(self) -> bool:
        return isinstance(self.state, Trashed)

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, Active)

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on title, content or any tag."""
        term = term.lower()
        return (
            term in self.title.lower()
            or term in self.content.lower()
            or any(term in tag.lower() for tag in self.tags)
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": sorted(self.tags),
            "isStarred": self.is_starred,
            "isArchived": self.is_archived,
            "isTrashed": self.is_trashed,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        """Create Note from a stored record, resolving the flags to one state."""
        if data.get("isTrashed"):
            state = Trashed()
        elif data.get("isArchived"):
            state = Archived()
        else:
            state = Active(starred=bool(data.get("isStarred")))
        return cls(
            id=data["id"],
            title=data["title"],
            content=data.get("content") or "",
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
            tags=frozenset(t.lower() for t in data.get("tags", [])),
            state=state,
        )


# ============== Transitions ==============


def toggle_star(note: Note, now: datetime | None = None) -> Note:
    """Star or unstar an active note. Archived and trashed notes are unchanged."""
    match note.state:
        case Active(starred=starred):
            return replace(note, state=Active(not starred), updated_at=now or datetime.now())
    return note


def toggle_archive(note: Note, now: datetime | None = None) -> Note:
    """Archive an active note or unarchive an archived one. Trashed notes are unchanged."""
    match note.state:
        case Active():
            return replace(note, state=Archived(), updated_at=now or datetime.now())
        case Archived():
            return replace(note, state=Active(), updated_at=now or datetime.now())
    return note


def toggle_trash(note: Note, now: datetime | None = None) -> Note | None:
    """Move a note to the trash. Trashing a trashed note deletes it (returns None)."""
    if note.is_trashed:
        return None
    return replace(note, state=Trashed(), updated_at=now or datetime.now())


def restore(note: Note, now: datetime | None = None) -> Note:
    """Bring a trashed note back as an unstarred active note."""
    if not note.is_trashed:
        return note
    return replace(note, state=Active(), updated_at=now or datetime.now())


def edit_note(
    note: Note,
    title: str | None = None,
    content: str | None = None,
    tags: Iterable[str] | None = None,
    now: datetime | None = None,
) -> Note:
    changes = {"updated_at": now or datetime.now()}
    if title is not None:
        changes["title"] = title.strip()
    if content is not None:
        changes["content"] = content
    if tags is not None:
        changes["tags"] = frozenset(t.strip().lower() for t in tags if t.strip())
    return replace(note, **changes)


def apply(notes: Iterable[Note], note_id: str, transition, *args, **kwargs) -> list[Note]:
    """
    Apply a transition to one note of a collection.

    A transition returning None removes the note. Unknown ids raise KeyError.
    """
    result = []
    found = False
    for note in notes:
        if note.id == note_id:
            found = True
            note = transition(note, *args, **kwargs)
            if note is None:
                continue
        result.append(note)
    if not found:
        raise KeyError(note_id)
    return result


# ============== Filtering ==============


def matches_filter(note: Note, active_filter: str) -> bool:
    """Predicate for a sidebar filter; any non-builtin filter is a tag."""
    if active_filter == FILTER_ALL:
        return note.is_active
    if active_filter == FILTER_STARRED:
        return note.is_starred
    if active_filter == FILTER_ARCHIVED:
        return note.is_archived
    if active_filter == FILTER_TRASH:
        return note.is_trashed
    return note.is_active and active_filter in note.tags


def filter_notes(notes: Iterable[Note], active_filter: str = FILTER_ALL, search_term: str = "") -> list[Note]:
    """
    Notes under a filter, narrowed by search, most recently updated first.

    Pure function - no I/O.
    """
    result = [n for n in notes if matches_filter(n, active_filter)]
    if search_term:
        result = [n for n in result if n.matches(search_term)]
    return sorted(result, key=lambda n: n.updated_at, reverse=True)


def list_tags(notes: Iterable[Note]) -> list[str]:
    """Distinct tags across active notes, alphabetically."""
    tags = set()
    for note in notes:
        if note.is_active:
            tags.update(note.tags)
    return sorted(tags)


def filter_counts(notes: Iterable[Note]) -> dict[str, int]:
    """Sidebar counts for the builtin filters."""
    notes = list(notes)
    return {f: sum(1 for n in notes if matches_filter(n, f)) for f in BUILTIN_FILTERS}
