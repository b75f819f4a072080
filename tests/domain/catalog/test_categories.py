"""Tests for the category repository."""

import pytest

from mezmurhub.domain.catalog import (
    CATEGORIES_COLLECTION,
    CategoryUpdate,
    NotFoundError,
    SongDraft,
    ValidationError,
)


class TestCreateCategory:
    def test_create_defaults(self, categories):
        category = categories.get(categories.create("  Worship  "))

        assert category.name == "Worship"
        assert category.order == 0
        assert category.description is None
        assert category.icon_url is None

    def test_empty_description_stored_as_absent(self, categories, store):
        category_id = categories.create("Praise", description="   ")
        assert store.get(CATEGORIES_COLLECTION, category_id)["description"] is None

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, categories, store, name):
        with pytest.raises(ValidationError) as exc_info:
            categories.create(name)
        assert exc_info.value.field == "name"
        assert store.list(CATEGORIES_COLLECTION) == []

    def test_negative_order_rejected(self, categories):
        with pytest.raises(ValidationError):
            categories.create("Praise", order=-1)


class TestListCategories:
    def test_sorted_by_ascending_order(self, categories):
        """{A: 2}, {B: 0}, {C: 1} lists as B, C, A."""
        categories.create("A", order=2)
        categories.create("B", order=0)
        categories.create("C", order=1)

        assert [c.name for c in categories.list()] == ["B", "C", "A"]

    def test_equal_orders_keep_insertion_order(self, categories):
        for name in ["First", "Second", "Third"]:
            categories.create(name, order=5)
        assert [c.name for c in categories.list()] == ["First", "Second", "Third"]

    def test_empty_catalog(self, categories):
        assert categories.list() == []

    def test_get_missing_returns_none(self, categories):
        assert categories.get("missing") is None


class TestUpdateCategory:
    def test_only_provided_fields_change(self, categories):
        category_id = categories.create("Praise", description="Upbeat", order=3)
        before = categories.get(category_id)

        updated = categories.update(category_id, CategoryUpdate(name="Praise Songs"))

        assert updated.name == "Praise Songs"
        assert updated.description == "Upbeat"
        assert updated.order == 3
        assert updated.created_at == before.created_at

    def test_empty_string_clears_description(self, categories):
        category_id = categories.create("Praise", description="Upbeat")
        updated = categories.update(category_id, CategoryUpdate(description=""))
        assert updated.description is None

    def test_blank_name_rejected(self, categories):
        category_id = categories.create("Praise")
        with pytest.raises(ValidationError):
            categories.update(category_id, CategoryUpdate(name=" "))

    def test_missing_category(self, categories):
        with pytest.raises(NotFoundError):
            categories.update("missing", CategoryUpdate(name="X"))

    def test_missing_category_with_no_changes(self, categories):
        with pytest.raises(NotFoundError):
            categories.update("missing", CategoryUpdate())


class TestDeleteCategory:
    def test_delete(self, categories):
        category_id = categories.create("Praise")
        categories.delete(category_id)
        assert categories.get(category_id) is None

    def test_delete_missing(self, categories):
        with pytest.raises(NotFoundError):
            categories.delete("missing")

    def test_delete_does_not_cascade_to_songs(self, categories, songs):
        """Songs keep the dangling id; name resolution just omits it."""
        worship = categories.create("Worship")
        praise = categories.create("Praise")
        song_id = songs.create(
            SongDraft(title="Song", lyrics="<p>x</p>", category_ids=[worship, praise])
        )

        categories.delete(worship)

        song = songs.get(song_id)
        assert song.category_ids == [worship, praise]
        assert categories.resolve_names(song.category_ids) == ["Praise"]
        assert [c.id for c in categories.resolve(song.category_ids)] == [praise]
