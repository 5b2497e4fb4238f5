"""Tests for note lifecycle and filtering."""

from datetime import datetime, timedelta

import pytest

from prohub.core.notes import (
    FILTER_STARRED,
    Active,
    Archived,
    Note,
    Trashed,
    apply,
    edit_note,
    filter_counts,
    filter_notes,
    list_tags,
    parse_tags,
    restore,
    toggle_archive,
    toggle_star,
    toggle_trash,
)


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0)


def make_note(note_id, title, now, hours_ago=0, content="", tags=(), state=None):
    ts = now - timedelta(hours=hours_ago)
    return Note(
        id=note_id,
        title=title,
        content=content,
        created_at=ts,
        updated_at=ts,
        tags=frozenset(tags),
        state=state or Active(),
    )


@pytest.fixture
def sample_notes(now):
    return [
        make_note("1", "Meeting notes", now, 5, "Discuss roadmap", ["work"]),
        make_note("2", "Starred idea", now, 1, "Build a **thing**", ["ideas", "work"], Active(starred=True)),
        make_note("3", "Old plan", now, 10, "Archived stuff", ["planning"], Archived()),
        make_note("4", "Junk", now, 2, "Trash me", ["work"], Trashed()),
        make_note("5", "Groceries", now, 3, "Milk, eggs", ["personal"]),
    ]


def ids(notes):
    return [n.id for n in notes]


class TestParseTags:
    def test_splits_and_lowercases(self):
        assert parse_tags("Work, ideas ,, ") == frozenset({"work", "ideas"})

    def test_empty(self):
        assert parse_tags("") == frozenset()
        assert parse_tags(None) == frozenset()


class TestTransitions:
    def test_star_toggles(self, now):
        note = make_note("1", "A", now, 1)
        starred = toggle_star(note, now)
        assert starred.is_starred
        assert starred.updated_at == now
        assert not toggle_star(starred, now).is_starred

    def test_star_archived_is_noop(self, now):
        note = make_note("1", "A", now, 1, state=Archived())
        assert toggle_star(note, now) is note

    def test_archive_clears_star(self, now):
        note = make_note("1", "A", now, 1, state=Active(starred=True))
        archived = toggle_archive(note, now)
        assert archived.is_archived
        assert not archived.is_starred
        assert archived.updated_at == now

    def test_unarchive(self, now):
        note = make_note("1", "A", now, 1, state=Archived())
        assert toggle_archive(note, now).state == Active(starred=False)

    def test_archive_trashed_is_noop(self, now):
        note = make_note("1", "A", now, 1, state=Trashed())
        assert toggle_archive(note, now) is note

    def test_trash_clears_archive_and_star(self, now):
        for state in (Active(starred=True), Archived()):
            trashed = toggle_trash(make_note("1", "A", now, 1, state=state), now)
            assert trashed.is_trashed
            assert not trashed.is_archived
            assert not trashed.is_starred

    def test_trash_twice_deletes(self, now):
        note = make_note("1", "A", now, 1, state=Trashed())
        assert toggle_trash(note, now) is None

    def test_restore(self, now):
        note = make_note("1", "A", now, 1, state=Trashed())
        restored = restore(note, now)
        assert restored.state == Active()
        assert restored.updated_at == now

    def test_edit(self, now):
        note = make_note("1", "A", now, 1)
        edited = edit_note(note, title=" B ", tags=["X"], now=now)
        assert edited.title == "B"
        assert edited.tags == frozenset({"x"})
        assert edited.content == ""
        assert edited.updated_at == now


class TestApply:
    def test_applies_to_one_note(self, sample_notes, now):
        result = apply(sample_notes, "1", toggle_star, now)
        assert next(n for n in result if n.id == "1").is_starred
        assert not sample_notes[0].is_starred

    def test_deletion_removes_note(self, sample_notes, now):
        result = apply(sample_notes, "4", toggle_trash, now)
        assert "4" not in ids(result)
        assert len(result) == 4

    def test_unknown_id(self, sample_notes):
        with pytest.raises(KeyError):
            apply(sample_notes, "nope", toggle_star)


class TestFilterNotes:
    def test_all_excludes_archived_and_trashed(self, sample_notes):
        assert ids(filter_notes(sample_notes, "all")) == ["2", "5", "1"]

    def test_starred(self, sample_notes):
        assert ids(filter_notes(sample_notes, FILTER_STARRED)) == ["2"]

    def test_archived(self, sample_notes):
        assert ids(filter_notes(sample_notes, "archived")) == ["3"]

    def test_trash(self, sample_notes):
        assert ids(filter_notes(sample_notes, "trash")) == ["4"]

    def test_tag_filter(self, sample_notes):
        assert ids(filter_notes(sample_notes, "work")) == ["2", "1"]

    def test_trashed_only_under_trash(self, sample_notes):
        for active_filter in ("all", "starred", "archived", "work"):
            assert "4" not in ids(filter_notes(sample_notes, active_filter))

    def test_search_title_case_insensitive(self, sample_notes):
        assert ids(filter_notes(sample_notes, "all", "MEETING")) == ["1"]

    def test_search_content(self, sample_notes):
        assert ids(filter_notes(sample_notes, "all", "eggs")) == ["5"]

    def test_search_tags(self, sample_notes):
        assert ids(filter_notes(sample_notes, "all", "idea")) == ["2"]

    def test_search_applies_after_filter(self, sample_notes):
        assert filter_notes(sample_notes, "archived", "roadmap") == []

    def test_sorted_by_updated_desc(self, sample_notes):
        result = filter_notes(sample_notes, "all")
        assert [n.updated_at for n in result] == sorted((n.updated_at for n in result), reverse=True)


class TestTagsAndCounts:
    def test_list_tags_only_active(self, sample_notes):
        assert list_tags(sample_notes) == ["ideas", "personal", "work"]

    def test_filter_counts(self, sample_notes):
        assert filter_counts(sample_notes) == {"all": 3, "starred": 1, "archived": 1, "trash": 1}


class TestSerialization:
    def test_flags_resolve_to_one_state(self, now):
        data = make_note("1", "A", now).to_dict()
        data.update(isStarred=True, isArchived=True, isTrashed=True)
        note = Note.from_dict(data)
        assert note.state == Trashed()
        assert not note.is_archived
        assert not note.is_starred

    def test_round_trip(self, now):
        note = make_note("1", "A", now, 2, "body", ["b", "a"], Active(starred=True))
        assert Note.from_dict(note.to_dict()) == note

    def test_offset_timestamps_become_naive(self, now):
        data = make_note("1", "A", now).to_dict()
        data["updatedAt"] = "2025-01-15T12:00:00+02:00"
        note = Note.from_dict(data)
        assert note.updated_at.tzinfo is None
        assert filter_notes([note, make_note("2", "B", now)]) != []
