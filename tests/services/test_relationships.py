"""Tests for the relationship toggle engine."""

from __future__ import annotations

import pytest
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from blogger.core.errors import (
    InvalidStateError,
    NotFoundError,
    PartialFailure,
    SelfReferenceError,
)
from blogger.models import Comment, CommentLike, Follow, Post, PostLike, User
from blogger.services import comments as comment_service
from blogger.services import posts as post_service
from blogger.services import relationships
from blogger.services.reconcile import reconcile_user
from blogger.services.relationships import (
    RelationKind,
    toggle,
    toggle_comment_like,
    toggle_follow,
    toggle_post_like,
)


def _rows(db, model, *criteria) -> int:
    return db.scalar(select(func.count()).select_from(model).where(*criteria))


class TestFollowToggle:
    def test_follow_then_unfollow(self, db_session, alice, bob) -> None:
        first = toggle_follow(db_session, alice.id, bob.id)
        assert first.is_following is True
        assert first.followers_count == 1
        assert first.following_count == 1

        second = toggle_follow(db_session, alice.id, bob.id)
        assert second.is_following is False
        assert second.followers_count == 0
        assert second.following_count == 0
        assert _rows(db_session, Follow) == 0

    def test_self_follow_rejected(self, db_session, alice) -> None:
        with pytest.raises(SelfReferenceError) as excinfo:
            toggle_follow(db_session, alice.id, alice.id)
        assert excinfo.value.kind == "self_reference"
        assert excinfo.value.identifiers == {"user_id": alice.id}

    def test_self_follow_rejected_after_other_follows(self, db_session, alice, bob) -> None:
        toggle_follow(db_session, bob.id, alice.id)
        toggle_follow(db_session, alice.id, bob.id)
        with pytest.raises(SelfReferenceError):
            toggle_follow(db_session, alice.id, alice.id)
        assert db_session.get(User, alice.id).following_count == 1

    def test_follow_unknown_user(self, db_session, alice) -> None:
        with pytest.raises(NotFoundError) as excinfo:
            toggle_follow(db_session, alice.id, 9999)
        assert excinfo.value.identifiers == {"entity": "user", "id": 9999}
        assert _rows(db_session, Follow) == 0

    @pytest.mark.parametrize("times", [2, 4, 6])
    def test_even_toggles_restore_state(self, db_session, alice, bob, times) -> None:
        for _ in range(times):
            toggle_follow(db_session, alice.id, bob.id)
        db_session.expire_all()
        assert _rows(db_session, Follow) == 0
        assert db_session.get(User, alice.id).following_count == 0
        assert db_session.get(User, bob.id).followers_count == 0

    @pytest.mark.parametrize("times", [1, 3, 5])
    def test_odd_toggles_flip_once(self, db_session, alice, bob, times) -> None:
        for _ in range(times):
            result = toggle_follow(db_session, alice.id, bob.id)
        assert result.is_following is True
        assert _rows(db_session, Follow) == 1
        assert result.followers_count == 1
        assert result.following_count == 1

    def test_counters_match_rows_after_mixed_sequence(
        self, db_session, alice, bob, carol
    ) -> None:
        sequence = [
            (alice, bob),
            (alice, carol),
            (bob, carol),
            (carol, alice),
            (alice, bob),
            (bob, alice),
            (carol, alice),
            (carol, bob),
        ]
        for actor, target in sequence:
            toggle_follow(db_session, actor.id, target.id)

        db_session.expire_all()
        for user in db_session.scalars(select(User)).unique():
            assert user.followers_count == _rows(db_session, Follow, Follow.followee_id == user.id)
            assert user.following_count == _rows(db_session, Follow, Follow.follower_id == user.id)

    def test_recount_heals_drifted_counters(self, db_session, alice, bob) -> None:
        db_session.execute(
            update(User).where(User.id == bob.id).values(followers_count=17)
        )
        db_session.commit()

        result = toggle_follow(db_session, alice.id, bob.id)

        assert result.followers_count == 1

    def test_partial_failure_keeps_actor_side(
        self, db_session, alice, bob, monkeypatch
    ) -> None:
        def _broken(db, user_id):
            raise SQLAlchemyError("target write failed")

        monkeypatch.setattr(relationships, "_refresh_followers_count", _broken)

        with pytest.raises(PartialFailure) as excinfo:
            toggle_follow(db_session, alice.id, bob.id)

        err = excinfo.value
        assert err.kind == "partial_failure"
        assert err.completed == "actor"
        assert err.failed == "target"
        assert err.identifiers["actor_id"] == alice.id
        assert err.identifiers["target_id"] == bob.id

        db_session.expire_all()
        assert _rows(db_session, Follow) == 1
        assert db_session.get(User, alice.id).following_count == 1
        assert db_session.get(User, bob.id).followers_count == 0

        monkeypatch.undo()
        repairs = reconcile_user(db_session, bob.id)
        assert [(r.field, r.stored, r.actual) for r in repairs] == [("followers_count", 0, 1)]
        assert db_session.get(User, bob.id).followers_count == 1

    def test_retry_after_partial_failure_converges(
        self, db_session, alice, bob, monkeypatch
    ) -> None:
        def _broken(db, user_id):
            raise SQLAlchemyError("target write failed")

        monkeypatch.setattr(relationships, "_refresh_followers_count", _broken)
        with pytest.raises(PartialFailure):
            toggle_follow(db_session, alice.id, bob.id)
        monkeypatch.undo()

        # The next toggle unfollows and recounts both sides from the rows.
        result = toggle_follow(db_session, alice.id, bob.id)
        assert result.is_following is False
        assert result.followers_count == 0
        assert result.following_count == 0


class TestPostLikeToggle:
    def test_like_and_unlike(self, db_session, post, bob) -> None:
        liked = toggle_post_like(db_session, bob.id, post.id)
        assert liked.is_liked is True
        assert liked.likes_count == 1

        unliked = toggle_post_like(db_session, bob.id, post.id)
        assert unliked.is_liked is False
        assert unliked.likes_count == 0
        assert _rows(db_session, PostLike) == 0

    def test_like_draft_rejected(self, db_session, draft_post, bob) -> None:
        with pytest.raises(InvalidStateError) as excinfo:
            toggle_post_like(db_session, bob.id, draft_post.id)
        assert excinfo.value.identifiers["post_id"] == draft_post.id
        db_session.expire_all()
        assert db_session.get(Post, draft_post.id).likes_count == 0
        assert _rows(db_session, PostLike) == 0

    def test_like_archived_rejected(self, db_session, post, alice, bob) -> None:
        post_service.update_post(db_session, alice.id, post.id, {"status": "archived"})
        with pytest.raises(InvalidStateError):
            toggle_post_like(db_session, bob.id, post.id)

    def test_like_missing_post(self, db_session, bob) -> None:
        with pytest.raises(NotFoundError):
            toggle_post_like(db_session, bob.id, 4242)

    def test_likes_from_several_users(self, db_session, post, alice, bob, carol) -> None:
        for user in (alice, bob, carol):
            toggle_post_like(db_session, user.id, post.id)
        result = toggle_post_like(db_session, bob.id, post.id)

        assert result.likes_count == 2
        assert _rows(db_session, PostLike, PostLike.post_id == post.id) == 2

    def test_recount_heals_drifted_likes(self, db_session, post, bob) -> None:
        db_session.execute(update(Post).where(Post.id == post.id).values(likes_count=42))
        db_session.commit()

        result = toggle_post_like(db_session, bob.id, post.id)

        assert result.likes_count == 1


class TestCommentLikeToggle:
    def test_like_comment(self, db_session, comment, alice) -> None:
        result = toggle_comment_like(db_session, alice.id, comment.id)
        assert result.is_liked is True
        assert result.likes_count == 1
        assert _rows(db_session, CommentLike) == 1

    def test_like_deleted_comment_rejected(self, db_session, comment, alice, bob) -> None:
        comment_service.soft_delete_comment(db_session, bob.id, comment.id)
        with pytest.raises(InvalidStateError):
            toggle_comment_like(db_session, alice.id, comment.id)
        db_session.expire_all()
        assert db_session.get(Comment, comment.id).likes_count == 0

    def test_like_missing_comment(self, db_session, alice) -> None:
        with pytest.raises(NotFoundError):
            toggle_comment_like(db_session, alice.id, 31337)


class TestDispatch:
    def test_toggle_accepts_kind_names(self, db_session, post, bob) -> None:
        result = toggle(db_session, "post_like", bob.id, post.id)
        assert result.active is True
        assert result.actor_count == 1
        assert result.target_count == 1

    def test_follow_result_sides(self, db_session, alice, bob) -> None:
        result = toggle(db_session, RelationKind.FOLLOW, alice.id, bob.id)
        assert (result.active, result.actor_count, result.target_count) == (True, 1, 1)

    def test_unknown_kind(self, db_session, alice, bob) -> None:
        with pytest.raises(ValueError):
            toggle(db_session, "bookmark", alice.id, bob.id)

    def test_insert_if_absent_tolerates_duplicates(self, db_session, alice, bob) -> None:
        relationships._insert_if_absent(
            db_session, Follow, follower_id=alice.id, followee_id=bob.id
        )
        db_session.commit()
        relationships._insert_if_absent(
            db_session, Follow, follower_id=alice.id, followee_id=bob.id
        )
        db_session.commit()
        assert _rows(db_session, Follow) == 1


def _vanish_after_read(monkeypatch, model, record_id: int) -> None:
    """Delete ``record_id`` right after the toggle reads the pair state."""

    def _row_exists_then_delete(db, *criteria) -> bool:
        db.execute(delete(model).where(model.id == record_id))
        db.commit()
        return False

    monkeypatch.setattr(relationships, "_row_exists", _row_exists_then_delete)


class TestHostVanishes:
    def test_post_deleted_mid_like(self, monkeypatch, db_session, post, bob) -> None:
        post_id, bob_id = post.id, bob.id
        _vanish_after_read(monkeypatch, Post, post_id)

        with pytest.raises(NotFoundError) as excinfo:
            toggle_post_like(db_session, bob_id, post_id)

        assert excinfo.value.identifiers == {"entity": "post", "id": post_id}
        assert _rows(db_session, PostLike) == 0

    def test_comment_deleted_mid_like(self, monkeypatch, db_session, comment, alice) -> None:
        comment_id, alice_id = comment.id, alice.id
        _vanish_after_read(monkeypatch, Comment, comment_id)

        with pytest.raises(NotFoundError):
            toggle_comment_like(db_session, alice_id, comment_id)

        assert _rows(db_session, CommentLike) == 0

    def test_actor_deleted_mid_follow(self, monkeypatch, db_session, alice, bob) -> None:
        alice_id, bob_id = alice.id, bob.id
        _vanish_after_read(monkeypatch, User, alice_id)

        with pytest.raises(NotFoundError):
            toggle_follow(db_session, alice_id, bob_id)

        assert _rows(db_session, Follow) == 0
        db_session.expire_all()
        assert db_session.get(User, bob_id).followers_count == 0
