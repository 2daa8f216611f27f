"""
Blog Backend - Comment Store Tests
===================================

What:  SqlCommentStore against a real SQLite database.

What we test:
    ✅ Create and read back by id and by post
    ✅ Update replaces text, NotFound for absent comments
    ✅ Delete reports whether a row was removed
"""

import pytest

from blog.exceptions import NotFoundError
from blog.models.comment import Comment
from blog.stores.comment_store import SqlCommentStore
from blog.stores.post_store import SqlPostStore


class TestCommentStore:

    def setup_method(self):
        self.store = SqlCommentStore()
        self.posts = SqlPostStore()

    async def _post(self, db, title="Post"):
        record = await self.posts.create(db, title, "Content", [])
        return record.id

    @pytest.mark.asyncio
    async def test_create_and_find(self, db_session):
        post_id = await self._post(db_session)

        created = await self.store.create(db_session, Comment(post_id=post_id, text="Nice post"))

        assert created.id is not None
        found = await self.store.find_by_id(db_session, created.id)
        assert found.text == "Nice post"
        assert found.post_id == post_id

    @pytest.mark.asyncio
    async def test_find_by_post_id_only_returns_that_post(self, db_session):
        first = await self._post(db_session, "First")
        second = await self._post(db_session, "Second")
        await self.store.create(db_session, Comment(post_id=first, text="a"))
        await self.store.create(db_session, Comment(post_id=second, text="b"))
        await self.store.create(db_session, Comment(post_id=first, text="c"))

        comments = await self.store.find_by_post_id(db_session, first)

        assert [c.text for c in comments] == ["a", "c"]
        assert await self.store.find_by_post_id(db_session, 999) == []

    @pytest.mark.asyncio
    async def test_update_text(self, db_session):
        post_id = await self._post(db_session)
        created = await self.store.create(db_session, Comment(post_id=post_id, text="before"))

        updated = await self.store.update(
            db_session, Comment(id=created.id, post_id=post_id, text="after")
        )

        assert updated.text == "after"
        assert (await self.store.find_by_id(db_session, created.id)).text == "after"

    @pytest.mark.asyncio
    async def test_update_missing_comment(self, db_session):
        with pytest.raises(NotFoundError):
            await self.store.update(db_session, Comment(id=42, post_id=1, text="x"))

    @pytest.mark.asyncio
    async def test_delete(self, db_session):
        post_id = await self._post(db_session)
        created = await self.store.create(db_session, Comment(post_id=post_id, text="bye"))

        assert await self.store.delete(db_session, created.id) is True
        assert await self.store.find_by_id(db_session, created.id) is None
        assert await self.store.delete(db_session, created.id) is False
