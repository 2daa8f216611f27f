"""
Blog Backend - Post Store Tests
================================

What:  SqlPostStore and SqlTagStore against a real SQLite database.
How:   Each test gets a fresh database file (see conftest.engine).

What we test:
    ✅ Create/read round trip with tags, likes and comment counts
    ✅ Search by title (case-insensitive) and by #tag (exact), terms trimmed
    ✅ Pagination order and page slicing, total counts
    ✅ Wholesale tag replacement on update, NotFound on missing posts
    ✅ Delete cascade to comments and tag links (tags survive)
    ✅ Sequential and concurrent like increments
"""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from blog.exceptions import NotFoundError, ValidationError
from blog.models.comment import Comment
from blog.models.post import post_tags
from blog.models.tag import Tag
from blog.stores.base import PostRecord
from blog.stores.post_store import SqlPostStore, normalize_tag_names
from blog.stores.tag_store import SqlTagStore


@pytest.fixture
def store():
    return SqlPostStore(tag_store=SqlTagStore())


class TestCreateAndFind:

    @pytest.mark.asyncio
    async def test_create_and_find_post(self, db_session, store):
        created = await store.create(db_session, "Test Post", "Test content", ["a", "b"])

        assert created.id is not None
        assert created.title == "Test Post"
        assert created.likes_count == 0

        found = await store.find_by_id(db_session, created.id)
        assert found is not None
        assert found.id == created.id
        assert found.tags == ["a", "b"]
        assert found.likes_count == 0
        assert found.comments_count == 0

    @pytest.mark.asyncio
    async def test_find_missing_post_returns_none(self, db_session, store):
        assert await store.find_by_id(db_session, 999) is None

    @pytest.mark.asyncio
    async def test_duplicate_and_blank_tags_collapsed(self, db_session, store):
        created = await store.create(db_session, "Post", "Text", ["java", " java ", "", "spring", "java"])
        assert created.tags == ["java", "spring"]

        found = await store.find_by_id(db_session, created.id)
        assert found.tags == ["java", "spring"]

    @pytest.mark.asyncio
    async def test_tags_shared_between_posts(self, db_session, store):
        await store.create(db_session, "One", "Text", ["java"])
        await store.create(db_session, "Two", "Text", ["java", "spring"])

        names = [tag.name for tag in await store.tag_store.find_all(db_session)]
        assert sorted(names) == ["java", "spring"]

    @pytest.mark.asyncio
    async def test_comments_count_computed_at_read_time(self, db_session, store):
        post = await store.create(db_session, "Post", "Text", [])
        db_session.add_all([
            Comment(post_id=post.id, text="first"),
            Comment(post_id=post.id, text="second"),
        ])
        await db_session.flush()

        found = await store.find_by_id(db_session, post.id)
        assert found.comments_count == 2


class TestSearch:

    @pytest.mark.asyncio
    async def test_find_all_without_search(self, db_session, store):
        await store.create(db_session, "First Post", "First content", ["java"])
        await store.create(db_session, "Second Post", "Second content", ["spring"])

        posts = await store.find_all(db_session, "", 1, 10)
        assert len(posts) == 2

    @pytest.mark.asyncio
    async def test_search_by_title(self, db_session, store):
        await store.create(db_session, "Java Tutorial", "Content", [])
        await store.create(db_session, "Spring Framework", "Content", [])

        posts = await store.find_all(db_session, "Java", 1, 10)

        assert [p.title for p in posts] == ["Java Tutorial"]

    @pytest.mark.asyncio
    async def test_title_search_is_case_insensitive(self, db_session, store):
        await store.create(db_session, "Java Tutorial", "Content", [])
        await store.create(db_session, "Spring Framework", "Content", [])

        assert [p.title for p in await store.find_all(db_session, "java", 1, 10)] == ["Java Tutorial"]
        assert [p.title for p in await store.find_all(db_session, "FRAMEWORK", 1, 10)] == ["Spring Framework"]
        assert await store.get_total_count(db_session, "jAvA") == 1

    @pytest.mark.asyncio
    async def test_title_search_treats_wildcards_literally(self, db_session, store):
        await store.create(db_session, "100% coverage", "Content", [])
        await store.create(db_session, "1000 coverage", "Content", [])

        posts = await store.find_all(db_session, "100%", 1, 10)
        assert [p.title for p in posts] == ["100% coverage"]

    @pytest.mark.asyncio
    async def test_search_by_tag(self, db_session, store):
        await store.create(db_session, "Post 1", "Content", ["java", "spring"])
        await store.create(db_session, "Post 2", "Content", ["python"])

        posts = await store.find_all(db_session, "#java", 1, 10)

        assert len(posts) == 1
        assert posts[0].title == "Post 1"
        assert await store.get_total_count(db_session, "#java") == 1

    @pytest.mark.asyncio
    async def test_tag_search_is_exact(self, db_session, store):
        await store.create(db_session, "Post 1", "Content", ["javascript"])
        await store.create(db_session, "Post 2", "Content", ["Java"])

        assert await store.find_all(db_session, "#java", 1, 10) == []
        assert await store.get_total_count(db_session, "#java") == 0

    @pytest.mark.asyncio
    async def test_search_terms_are_trimmed(self, db_session, store):
        await store.create(db_session, "Java Tutorial", "Content", ["java"])
        await store.create(db_session, "Python Tips", "Content", ["python"])

        assert [p.title for p in await store.find_all(db_session, "  Java  ", 1, 10)] == ["Java Tutorial"]
        assert [p.title for p in await store.find_all(db_session, "# python ", 1, 10)] == ["Python Tips"]
        assert await store.get_total_count(db_session, " #java") == 1

    @pytest.mark.asyncio
    async def test_hash_alone_matches_nothing(self, db_session, store):
        await store.create(db_session, "Post", "Content", ["java"])
        assert await store.find_all(db_session, "#", 1, 10) == []

    @pytest.mark.asyncio
    async def test_tag_search_does_not_match_titles(self, db_session, store):
        await store.create(db_session, "#java in the title", "Content", ["python"])
        assert await store.find_all(db_session, "#java", 1, 10) == []


class TestPagination:

    @pytest.mark.asyncio
    async def test_newest_first_and_page_slices(self, db_session, store):
        for i in range(1, 6):
            await store.create(db_session, f"Post {i}", "Content", [])

        page1 = await store.find_all(db_session, "", 1, 2)
        page2 = await store.find_all(db_session, "", 2, 2)
        page3 = await store.find_all(db_session, "", 3, 2)
        page4 = await store.find_all(db_session, "", 4, 2)

        assert [p.title for p in page1] == ["Post 5", "Post 4"]
        assert [p.title for p in page2] == ["Post 3", "Post 2"]
        assert [p.title for p in page3] == ["Post 1"]
        assert page4 == []

    @pytest.mark.asyncio
    async def test_pages_carry_tags_and_counts(self, db_session, store):
        first = await store.create(db_session, "First", "Content", ["x"])
        await store.create(db_session, "Second", "Content", ["y", "z"])
        db_session.add(Comment(post_id=first.id, text="hi"))
        await db_session.flush()

        posts = await store.find_all(db_session, "", 1, 10)

        assert [(p.title, p.tags, p.comments_count) for p in posts] == [
            ("Second", ["y", "z"], 0),
            ("First", ["x"], 1),
        ]

    @pytest.mark.asyncio
    async def test_invalid_page_arguments(self, db_session, store):
        with pytest.raises(ValidationError):
            await store.find_all(db_session, "", 0, 10)
        with pytest.raises(ValidationError):
            await store.find_all(db_session, "", 1, 0)

    @pytest.mark.asyncio
    async def test_get_total_count(self, db_session, store):
        for i in range(3):
            await store.create(db_session, f"Post {i}", "Content", [])

        assert await store.get_total_count(db_session, "") == 3
        assert await store.get_total_count(db_session, "   ") == 3


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_tags(self, db_session, store):
        created = await store.create(db_session, "Original Title", "Original content", ["tag1"])

        updated = await store.update(
            db_session,
            PostRecord(id=created.id, title="Updated Title", text="Updated content", tags=["tag2", "tag3"]),
        )

        assert updated.title == "Updated Title"
        assert updated.text == "Updated content"
        assert updated.tags == ["tag2", "tag3"]

        found = await store.find_by_id(db_session, created.id)
        assert found.tags == ["tag2", "tag3"]
        assert await store.find_all(db_session, "#tag1", 1, 10) == []

    @pytest.mark.asyncio
    async def test_update_can_keep_existing_tag(self, db_session, store):
        created = await store.create(db_session, "Title", "Text", ["keep", "drop"])

        updated = await store.update(
            db_session, PostRecord(id=created.id, title="Title", text="Text", tags=["new", "keep"])
        )

        assert updated.tags == ["new", "keep"]

    @pytest.mark.asyncio
    async def test_update_preserves_likes(self, db_session, store):
        created = await store.create(db_session, "Title", "Text", [])
        await store.increment_likes(db_session, created.id)

        updated = await store.update(
            db_session, PostRecord(id=created.id, title="New", text="Text", tags=[])
        )

        assert updated.likes_count == 1

    @pytest.mark.asyncio
    async def test_update_missing_post_raises(self, db_session, store):
        with pytest.raises(NotFoundError):
            await store.update(db_session, PostRecord(id=12345, title="T", text="X", tags=[]))


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_post(self, db_session, store):
        created = await store.create(db_session, "Test Post", "Test content", [])
        before = await store.get_total_count(db_session, "")

        assert await store.delete(db_session, created.id) is True

        assert await store.find_by_id(db_session, created.id) is None
        assert await store.get_total_count(db_session, "") == before - 1

    @pytest.mark.asyncio
    async def test_delete_cascades_to_comments_and_links_but_not_tags(self, db_session, store):
        created = await store.create(db_session, "Post", "Content", ["java"])
        db_session.add(Comment(post_id=created.id, text="bye"))
        await db_session.flush()

        await store.delete(db_session, created.id)

        comments = await db_session.execute(select(func.count(Comment.id)))
        links = await db_session.execute(select(func.count()).select_from(post_tags))
        tags = await db_session.execute(select(Tag.name))
        assert comments.scalar() == 0
        assert links.scalar() == 0
        assert tags.scalars().all() == ["java"]

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, db_session, store):
        created = await store.create(db_session, "Post", "Content", [])

        assert await store.delete(db_session, created.id) is True
        assert await store.delete(db_session, created.id) is False


class TestLikes:

    @pytest.mark.asyncio
    async def test_increment_likes_sequentially(self, db_session, store):
        created = await store.create(db_session, "Test Post", "Test content", [])

        assert await store.increment_likes(db_session, created.id) == 1
        assert await store.increment_likes(db_session, created.id) == 2

        found = await store.find_by_id(db_session, created.id)
        assert found.likes_count == 2

    @pytest.mark.asyncio
    async def test_increment_likes_missing_post(self, db_session, store):
        with pytest.raises(NotFoundError):
            await store.increment_likes(db_session, 404)

    @pytest.mark.asyncio
    async def test_concurrent_increments_lose_nothing(self, session_factory, store):
        async with session_factory() as session:
            created = await store.create(session, "Popular", "Content", [])
            await session.commit()

        async def like_once():
            async with session_factory() as session:
                count = await store.increment_likes(session, created.id)
                await session.commit()
                return count

        n = 10
        results = await asyncio.gather(*(like_once() for _ in range(n)))

        assert sorted(results) == list(range(1, n + 1))
        async with session_factory() as session:
            found = await store.find_by_id(session, created.id)
        assert found.likes_count == n


class TestImage:

    @pytest.mark.asyncio
    async def test_set_image_returns_previous_path(self, db_session, store):
        created = await store.create(db_session, "Post", "Content", [])

        assert await store.set_image(db_session, created.id, "2026/10/19/a.png") is None
        assert await store.set_image(db_session, created.id, "2026/10/19/b.png") == "2026/10/19/a.png"

        found = await store.find_by_id(db_session, created.id)
        assert found.image_path == "2026/10/19/b.png"

    @pytest.mark.asyncio
    async def test_set_image_missing_post(self, db_session, store):
        with pytest.raises(NotFoundError):
            await store.set_image(db_session, 7, "x.png")


class TestTagStore:

    @pytest.mark.asyncio
    async def test_ensure_is_idempotent(self, db_session):
        tags = SqlTagStore()

        first = await tags.ensure(db_session, "python")
        second = await tags.ensure(db_session, "python")
        other = await tags.ensure(db_session, "Python")

        assert first == second
        assert other != first
        assert {t.name for t in await tags.find_all(db_session)} == {"python", "Python"}

    @pytest.mark.asyncio
    async def test_ensure_reuses_tag_created_concurrently(self, session_factory, store):
        """Losing the insert race reuses the winner's tag and keeps the transaction usable."""
        tags = SqlTagStore()
        async with session_factory() as session:
            winner_id = await tags.ensure(session, "race")
            await session.commit()

        real_find_id = tags._find_id
        calls = []

        async def miss_first_lookup(db, name):
            calls.append(name)
            if len(calls) == 1:
                return None
            return await real_find_id(db, name)

        async with session_factory() as session:
            post = await store.create(session, "Before", "Content", [])
            with patch.object(tags, "_find_id", side_effect=miss_first_lookup):
                assert await tags.ensure(session, "race") == winner_id

            # The post insert survived the failed tag insert
            assert (await store.find_by_id(session, post.id)).title == "Before"
            await session.commit()

        assert len(calls) == 2
        async with session_factory() as session:
            names = [t.name for t in await tags.find_all(session)]
        assert names == ["race"]


def test_normalize_tag_names():
    assert normalize_tag_names(None) == []
    assert normalize_tag_names(["b", "a", "b", "  ", " c "]) == ["b", "a", "c"]
