"""Tests for post creation, editing, deletion and listings."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select, update

from blogger.core.errors import AuthorizationError, NotFoundError
from blogger.db.time import utcnow
from blogger.models import Comment, CommentLike, Post, PostLike, User
from blogger.services import comments as comment_service
from blogger.services import posts as post_service
from blogger.services.relationships import toggle_comment_like, toggle_follow, toggle_post_like


def test_reading_time_rounds_up() -> None:
    assert post_service.reading_time("word") == 1
    assert post_service.reading_time(" ".join(["word"] * 201)) == 2


def test_excerpt_strips_markup_and_truncates() -> None:
    assert post_service.make_excerpt("<p>Short</p>") == "Short"
    excerpt = post_service.make_excerpt("x" * 250)
    assert excerpt == "x" * 200 + "..."


def test_normalize_tags() -> None:
    assert post_service.normalize_tags([" Python", "python", "", "Web "]) == ["python", "web"]


def test_create_post_sets_derived_fields(db_session, alice, make_post) -> None:
    post = make_post(alice, tags=["Python", " FastAPI "], content="<b>Bold</b> words here")

    assert post.tags == ["python", "fastapi"]
    assert post.excerpt == "Bold words here"
    assert post.reading_time == 1
    assert post.published_at is not None
    assert db_session.get(User, alice.id).posts_count == 1


def test_draft_has_no_publish_date(draft_post) -> None:
    assert draft_post.status == "draft"
    assert draft_post.published_at is None


def test_publishing_sets_date_once(db_session, alice, draft_post) -> None:
    published = post_service.update_post(
        db_session, alice.id, draft_post.id, {"status": "published"}
    )
    first_date = published.published_at
    assert first_date is not None

    post_service.update_post(db_session, alice.id, draft_post.id, {"status": "archived"})
    again = post_service.update_post(
        db_session, alice.id, draft_post.id, {"status": "published"}
    )
    assert again.published_at == first_date


def test_update_content_recomputes_excerpt(db_session, alice, post) -> None:
    updated = post_service.update_post(
        db_session, alice.id, post.id, {"content": "Fresh text", "title": "New title"}
    )
    assert updated.title == "New title"
    assert updated.excerpt == "Fresh text"


def test_update_requires_author(db_session, bob, post) -> None:
    with pytest.raises(AuthorizationError):
        post_service.update_post(db_session, bob.id, post.id, {"title": "Mine now"})


def test_delete_post_removes_engagement(db_session, alice, bob, post) -> None:
    toggle_post_like(db_session, bob.id, post.id)
    comment = comment_service.create_comment(db_session, bob.id, post.id, "first")
    reply = comment_service.create_comment(
        db_session, alice.id, post.id, "second", parent_comment_id=comment.id
    )
    toggle_comment_like(db_session, alice.id, reply.id)

    post_service.delete_post(db_session, alice.id, post.id)

    for model in (Post, PostLike, Comment, CommentLike):
        assert db_session.scalar(select(func.count()).select_from(model)) == 0
    assert db_session.get(User, alice.id).posts_count == 0
    with pytest.raises(NotFoundError):
        toggle_post_like(db_session, bob.id, post.id)


def test_delete_requires_author(db_session, bob, post) -> None:
    with pytest.raises(AuthorizationError):
        post_service.delete_post(db_session, bob.id, post.id)


def test_posts_count_never_negative(db_session, alice, post) -> None:
    db_session.execute(update(User).where(User.id == alice.id).values(posts_count=0))
    db_session.commit()

    post_service.delete_post(db_session, alice.id, post.id)

    assert db_session.get(User, alice.id).posts_count == 0


def test_view_post_counts_views(db_session, post) -> None:
    post_service.view_post(db_session, post.id)
    viewed = post_service.view_post(db_session, post.id)
    assert viewed.views == 2


def test_list_published_filters(db_session, alice, bob, make_post, draft_post) -> None:
    make_post(alice, title="Py", tags=["python"])
    make_post(bob, title="Go", tags=["go"])

    everything, total = post_service.list_published(db_session)
    assert total == 2
    assert "Work in progress" not in {p.title for p in everything}

    tagged, _ = post_service.list_published(db_session, tag="Python")
    assert [p.title for p in tagged] == ["Py"]

    by_bob, _ = post_service.list_published(db_session, author="bob")
    assert [p.title for p in by_bob] == ["Go"]


def test_trending_orders_by_likes(db_session, alice, bob, carol, make_post) -> None:
    quiet = make_post(alice, title="Quiet")
    loud = make_post(alice, title="Loud")
    old = make_post(alice, title="Old")
    db_session.execute(
        update(Post).where(Post.id == old.id).values(published_at=utcnow() - timedelta(days=30))
    )
    db_session.commit()
    for user in (bob, carol):
        toggle_post_like(db_session, user.id, loud.id)
        toggle_post_like(db_session, user.id, old.id)

    trending = post_service.list_trending(db_session)

    assert [p.id for p in trending] == [loud.id, quiet.id]


def test_feed_uses_followed_authors(db_session, alice, bob, carol, make_post) -> None:
    make_post(alice, title="From alice")
    make_post(bob, title="From bob")

    everything, total = post_service.list_feed(db_session, carol.id)
    assert total == 2

    toggle_follow(db_session, carol.id, bob.id)
    feed, total = post_service.list_feed(db_session, carol.id)
    assert total == 1
    assert feed[0].title == "From bob"


def test_user_posts_status_filter(db_session, alice, post, draft_post) -> None:
    published, total = post_service.list_user_posts(db_session, "alice")
    assert total == 1
    assert published[0].id == post.id

    _, total_all = post_service.list_user_posts(db_session, "alice", status="all")
    assert total_all == 2

    with pytest.raises(NotFoundError):
        post_service.list_user_posts(db_session, "nobody")
