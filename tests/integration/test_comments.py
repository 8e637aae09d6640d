"""Integration tests for comment endpoints."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import payload
from infrastructure.database.models import CommentFloorBuilding

pytestmark = pytest.mark.asyncio

COMMENTS = "/api/v3/comments"
ARTICLES = "/api/v3/articles"


async def _comment(
    client: AsyncClient,
    headers: dict,
    target_id: int,
    content: str = "Great write-up, thanks for sharing.",
    target_type: int = 1,
) -> dict:
    response = await client.post(
        f"{COMMENTS}/root",
        headers=headers,
        json={"target_type": target_type, "target_id": target_id, "content": content},
    )
    return payload(response)


async def _reply(
    client: AsyncClient,
    headers: dict,
    parent_id: int,
    content: str = "Agreed, nicely put.",
) -> dict:
    response = await client.post(
        f"{COMMENTS}/reply",
        headers=headers,
        json={"parent_id": parent_id, "content": content},
    )
    return payload(response)


async def _get(client: AsyncClient, comment_id: int) -> dict:
    return payload(await client.get(f"{COMMENTS}/{comment_id}"))


async def _roots(client: AsyncClient, article_id: int, **params) -> dict:
    params.update(target_type=1, target_id=article_id)
    return payload(await client.get(f"{COMMENTS}/root", params=params))


class TestRootComments:
    """Tests for POST/GET /comments/root."""

    async def test_floors_and_author_snapshot(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        first = await _comment(async_client, reader_headers, article_id)
        second = await _comment(async_client, author_headers, article_id)

        assert first["floor_number"] == 1
        assert second["floor_number"] == 2
        assert first["root_id"] == first["id"]
        assert first["depth"] == 0
        assert first["username"] == "grace"
        assert first["is_author"] is False
        assert second["is_author"] is True
        assert second["user_avatar"] == "https://cdn.test/ada.png"

        article = payload(await async_client.get(f"{ARTICLES}/{article_id}"))
        assert article["article"]["comment_count"] == 2

    async def test_target_is_required(self, async_client: AsyncClient):
        response = await async_client.get(f"{COMMENTS}/root", params={"target_type": "1"})
        assert response.json() == {
            "code": 400,
            "message": "target_type and target_id are required",
            "data": None,
        }

    async def test_unauthenticated(self, async_client: AsyncClient, article_id: int):
        response = await async_client.post(
            f"{COMMENTS}/root",
            json={"target_type": 1, "target_id": article_id, "content": "Hello there"},
        )
        assert response.json()["code"] == 401

    async def test_missing_article(self, async_client: AsyncClient, reader_headers: dict):
        response = await async_client.post(
            f"{COMMENTS}/root",
            headers=reader_headers,
            json={"target_type": 1, "target_id": 999, "content": "Hello there"},
        )
        assert response.json()["code"] == 404

    async def test_comments_disabled(
        self,
        async_client: AsyncClient,
        article_id: int,
        author_headers: dict,
        reader_headers: dict,
    ):
        payload(
            await async_client.put(
                f"{ARTICLES}/{article_id}", headers=author_headers, json={"allow_comment": False}
            )
        )

        response = await async_client.post(
            f"{COMMENTS}/root",
            headers=reader_headers,
            json={"target_type": 1, "target_id": article_id, "content": "Hello there"},
        )
        body = response.json()
        assert body["code"] == 400
        assert body["message"] == "Comments are disabled for this article"

    async def test_other_target_types(self, async_client: AsyncClient, reader_headers: dict):
        comment = await _comment(async_client, reader_headers, 5, target_type=2)
        assert comment["target_type"] == 2
        assert comment["floor_number"] == 1

    async def test_pinned_first(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        older = await _comment(async_client, reader_headers, article_id)
        newer = await _comment(async_client, reader_headers, article_id)

        listed = await _roots(async_client, article_id, sort_by="time")
        assert [c["id"] for c in listed["comments"]] == [newer["id"], older["id"]]

        payload(await async_client.post(f"{COMMENTS}/{older['id']}/pin", headers=author_headers))

        listed = await _roots(async_client, article_id, sort_by="time")
        assert [c["id"] for c in listed["comments"]] == [older["id"], newer["id"]]
        assert listed["comments"][0]["is_pinned"] is True

    async def test_oldest_first_sort(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        older = await _comment(async_client, reader_headers, article_id)
        newer = await _comment(async_client, reader_headers, article_id)

        listed = await _roots(async_client, article_id, sort_by="time_asc")
        assert [c["id"] for c in listed["comments"]] == [older["id"], newer["id"]]

    async def test_mentions(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        response = await async_client.post(
            f"{COMMENTS}/root",
            headers=reader_headers,
            json={
                "target_type": 1,
                "target_id": article_id,
                "content": "What do you think, @ada?",
                "at_user_ids": ["user-author", " ", "user-author"],
            },
        )
        comment = payload(response)
        assert comment["at_user_ids"] == ["user-author"]

        response = await async_client.post(
            f"{COMMENTS}/reply",
            headers=author_headers,
            json={"parent_id": comment["id"], "content": "Fair point", "at_user_ids": ["user-reader"]},
        )
        assert payload(response)["at_user_ids"] == ["user-reader"]
        assert (await _get(async_client, comment["id"]))["at_user_ids"] == ["user-author"]


class TestFloorBuilding:
    """Each user's run of comments on a target is tracked as they post."""

    async def _runs(self, session: AsyncSession, target_id: int) -> dict[str, CommentFloorBuilding]:
        result = await session.execute(
            select(CommentFloorBuilding).where(CommentFloorBuilding.target_id == target_id)
        )
        return {run.user_id: run for run in result.scalars().all()}

    async def test_roots_and_replies_extend_the_run(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        first = await _comment(async_client, reader_headers, article_id)
        reply = await _reply(async_client, reader_headers, first["id"])
        second = await _comment(async_client, reader_headers, article_id)
        other = await _comment(async_client, author_headers, article_id)

        runs = await self._runs(db_session, article_id)
        reader_run = runs["user-reader"]
        assert reader_run.target_type == 1
        assert reader_run.comment_ids == [first["id"], reply["id"], second["id"]]
        assert reader_run.floor_count == 3
        assert reader_run.first_comment_time <= reader_run.last_comment_time

        author_run = runs["user-author"]
        assert author_run.comment_ids == [other["id"]]
        assert author_run.floor_count == 1
        assert author_run.first_comment_time == author_run.last_comment_time

    async def test_runs_are_per_target(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        article_id: int,
        reader_headers: dict,
    ):
        await _comment(async_client, reader_headers, article_id)
        elsewhere = await _comment(async_client, reader_headers, 5, target_type=2)

        assert (await self._runs(db_session, article_id))["user-reader"].floor_count == 1
        run = (await self._runs(db_session, 5))["user-reader"]
        assert run.target_type == 2
        assert run.comment_ids == [elsewhere["id"]]



class TestReplies:
    """Tests for POST /comments/reply and thread reads."""

    async def test_threading_fields(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        root = await _comment(async_client, reader_headers, article_id)
        first = await _reply(async_client, author_headers, root["id"])
        nested = await _reply(async_client, reader_headers, first["id"])

        assert first["parent_id"] == root["id"]
        assert first["root_id"] == root["id"]
        assert first["floor_number"] == root["floor_number"]
        assert first["sub_floor_number"] == 1
        assert first["depth"] == 1
        assert first["reply_chain"] == [root["id"]]
        assert first["reply_to_user_id"] == "user-reader"
        assert first["reply_to_comment_id"] == root["id"]
        assert first["is_author"] is True

        assert nested["root_id"] == root["id"]
        assert nested["depth"] == 2
        assert nested["sub_floor_number"] == 1
        assert nested["reply_chain"] == [root["id"], first["id"]]
        assert nested["reply_to_user_id"] == "user-author"

        root_now = await _get(async_client, root["id"])
        assert root_now["reply_count"] == 1
        assert root_now["total_reply_count"] == 2
        assert (await _get(async_client, first["id"]))["reply_count"] == 1

        article = payload(await async_client.get(f"{ARTICLES}/{article_id}"))
        assert article["article"]["comment_count"] == 3

    async def test_sub_floors_increase(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        root = await _comment(async_client, reader_headers, article_id)
        first = await _reply(async_client, reader_headers, root["id"])
        second = await _reply(async_client, reader_headers, root["id"])

        assert [first["sub_floor_number"], second["sub_floor_number"]] == [1, 2]

        replies = payload(await async_client.get(f"{COMMENTS}/{root['id']}/replies"))
        assert [c["id"] for c in replies["comments"]] == [first["id"], second["id"]]

        roots = await _roots(async_client, article_id)
        assert roots["total"] == 1

    async def test_tree(self, async_client: AsyncClient, article_id: int, reader_headers: dict):
        root = await _comment(async_client, reader_headers, article_id)
        first = await _reply(async_client, reader_headers, root["id"])
        nested = await _reply(async_client, reader_headers, first["id"])

        tree = payload(await async_client.get(f"{COMMENTS}/{root['id']}/tree"))
        assert tree["id"] == root["id"]
        assert [r["id"] for r in tree["replies"]] == [first["id"]]
        assert [r["id"] for r in tree["replies"][0]["replies"]] == [nested["id"]]

        subtree = payload(await async_client.get(f"{COMMENTS}/{first['id']}/tree"))
        assert subtree["id"] == first["id"]
        assert [r["id"] for r in subtree["replies"]] == [nested["id"]]

    async def test_missing_parent(self, async_client: AsyncClient, reader_headers: dict):
        response = await async_client.post(
            f"{COMMENTS}/reply",
            headers=reader_headers,
            json={"parent_id": 999, "content": "Anyone home?"},
        )
        body = response.json()
        assert body["code"] == 404
        assert body["message"] == "Parent comment not found"


class TestInteractions:
    """Tests for like / dislike endpoints."""

    async def test_like_lifecycle(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        url = f"{COMMENTS}/{comment['id']}/like"

        payload(await async_client.post(url, headers=reader_headers))
        assert (await _get(async_client, comment["id"]))["like_count"] == 1

        again = await async_client.post(url, headers=reader_headers)
        assert again.json()["code"] == 409
        assert again.json()["message"] == "Comment already liked"

        payload(await async_client.delete(url, headers=reader_headers))
        assert (await _get(async_client, comment["id"]))["like_count"] == 0

        not_liked = await async_client.delete(url, headers=reader_headers)
        assert not_liked.json()["code"] == 400

    async def test_dislike(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict, make_user
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        url = f"{COMMENTS}/{comment['id']}/dislike"
        other = await make_user("user-other")

        payload(await async_client.post(url, headers=other))
        assert (await _get(async_client, comment["id"]))["dislike_count"] == 1

        payload(await async_client.delete(url, headers=other))
        assert (await _get(async_client, comment["id"]))["dislike_count"] == 0

    async def test_engagement_makes_comment_hot(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        root = await _comment(async_client, reader_headers, article_id)
        await _reply(async_client, author_headers, root["id"])
        await _reply(async_client, author_headers, root["id"])
        assert (await _get(async_client, root["id"]))["is_hot"] is False

        payload(await async_client.post(f"{COMMENTS}/{root['id']}/like", headers=author_headers))

        current = await _get(async_client, root["id"])
        assert current["is_hot"] is True
        assert current["hot_score"] == pytest.approx(12.0, rel=1e-3)

        hot = payload(
            await async_client.get(
                f"{COMMENTS}/hot", params={"target_type": 1, "target_id": article_id}
            )
        )
        assert [c["id"] for c in hot] == [root["id"]]

    async def test_missing_comment(self, async_client: AsyncClient, reader_headers: dict):
        response = await async_client.post(f"{COMMENTS}/999/like", headers=reader_headers)
        assert response.json()["code"] == 404

    async def test_non_numeric_id(self, async_client: AsyncClient, reader_headers: dict):
        response = await async_client.get(f"{COMMENTS}/abc")
        assert response.status_code == 200
        assert response.json()["code"] == 400

        response = await async_client.post(f"{COMMENTS}/abc/like", headers=reader_headers)
        assert response.json()["code"] == 400


class TestDeleteComment:
    """Tests for DELETE /comments/{id}."""

    async def test_owner_deletes(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        comment = await _comment(async_client, reader_headers, article_id)

        payload(await async_client.delete(f"{COMMENTS}/{comment['id']}", headers=reader_headers))

        assert (await async_client.get(f"{COMMENTS}/{comment['id']}")).json()["code"] == 404
        article = payload(await async_client.get(f"{ARTICLES}/{article_id}"))
        assert article["article"]["comment_count"] == 0

    async def test_others_cannot_delete(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        response = await async_client.delete(
            f"{COMMENTS}/{comment['id']}", headers=author_headers
        )
        assert response.json()["code"] == 403

    async def test_admin_can_delete(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        admin_headers: dict,
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        payload(await async_client.delete(f"{COMMENTS}/{comment['id']}", headers=admin_headers))

    async def test_reply_deletion_updates_thread_counters(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        root = await _comment(async_client, reader_headers, article_id)
        reply = await _reply(async_client, reader_headers, root["id"])

        payload(await async_client.delete(f"{COMMENTS}/{reply['id']}", headers=reader_headers))

        root_now = await _get(async_client, root["id"])
        assert root_now["reply_count"] == 0
        assert root_now["total_reply_count"] == 0
        tree = payload(await async_client.get(f"{COMMENTS}/{root['id']}/tree"))
        assert tree["replies"] == []


class TestStats:
    async def test_target_stats(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        root = await _comment(async_client, reader_headers, article_id)
        await _comment(async_client, reader_headers, article_id)
        await _reply(async_client, reader_headers, root["id"])

        stats = payload(
            await async_client.get(
                f"{COMMENTS}/stats", params={"target_type": 1, "target_id": article_id}
            )
        )
        assert stats["total_count"] == 3
        assert stats["root_count"] == 2
        assert stats["today_count"] == 3
        assert stats["last_comment_time"] is not None

    async def test_empty_target_stats(self, async_client: AsyncClient):
        stats = payload(
            await async_client.get(f"{COMMENTS}/stats", params={"target_type": 1, "target_id": 7})
        )
        assert stats["total_count"] == 0
        assert stats["last_comment_time"] is None

    async def test_my_stats(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        liked = await _comment(async_client, reader_headers, article_id)
        await _comment(async_client, reader_headers, article_id)
        payload(await async_client.post(f"{COMMENTS}/{liked['id']}/like", headers=author_headers))
        payload(await async_client.post(f"{COMMENTS}/{liked['id']}/feature", headers=author_headers))

        stats = payload(await async_client.get(f"{COMMENTS}/my-stats", headers=reader_headers))
        assert stats["total_comments"] == 2
        assert stats["total_likes"] == 1
        assert stats["avg_like_count"] == pytest.approx(0.5)
        assert stats["featured_count"] == 1

    async def test_my_stats_requires_auth(self, async_client: AsyncClient):
        response = await async_client.get(f"{COMMENTS}/my-stats")
        assert response.json()["code"] == 401


class TestScreening:
    """Sensitive words applied to new comments."""

    async def _add_word(self, client: AsyncClient, headers: dict, **fields) -> dict:
        return payload(await client.post("/api/v3/sensitive-words", headers=headers, json=fields))

    async def test_blocked_word_rejects(
        self,
        async_client: AsyncClient,
        article_id: int,
        admin_headers: dict,
        reader_headers: dict,
    ):
        await self._add_word(async_client, admin_headers, word="forbidden", action=2)

        response = await async_client.post(
            f"{COMMENTS}/root",
            headers=reader_headers,
            json={"target_type": 1, "target_id": article_id, "content": "this is Forbidden talk"},
        )
        body = response.json()
        assert body["code"] == 400
        assert body["message"] == "Comment contains sensitive words"

    async def test_replaceable_word_is_masked(
        self,
        async_client: AsyncClient,
        article_id: int,
        admin_headers: dict,
        reader_headers: dict,
    ):
        await self._add_word(async_client, admin_headers, word="darn", action=1)

        comment = await _comment(async_client, reader_headers, article_id, "well darn it all")
        assert comment["content"] == "well **** it all"
        assert comment["risk_level"] == 2
        assert comment["status"] == 1

    async def test_serious_word_folds(
        self,
        async_client: AsyncClient,
        article_id: int,
        admin_headers: dict,
        reader_headers: dict,
    ):
        await self._add_word(async_client, admin_headers, word="vile", level=2, action=3)

        comment = await _comment(async_client, reader_headers, article_id, "a vile remark here")
        assert comment["status"] == 4
        assert comment["audit_status"] == 2
        assert (await _roots(async_client, article_id))["total"] == 0


class TestReports:
    async def test_duplicate_report(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict, make_user
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        url = f"{COMMENTS}/{comment['id']}/report"
        reporter = await make_user("user-x")

        report = payload(await async_client.post(url, headers=reporter, json={"reason_type": 1}))
        assert report["status"] == 0
        assert report["reporter_user_id"] == "user-x"

        again = await async_client.post(url, headers=reporter, json={"reason_type": 1})
        assert again.json()["code"] == 409

    async def test_enough_reports_fold_comment(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict, make_user
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        url = f"{COMMENTS}/{comment['id']}/report"

        for reporter in ("user-r1", "user-r2", "user-r3"):
            headers = await make_user(reporter)
            payload(
                await async_client.post(
                    url, headers=headers, json={"reason_type": 4, "reason_desc": "rude"}
                )
            )

        assert (await _get(async_client, comment["id"]))["status"] == 4
        assert (await _roots(async_client, article_id))["total"] == 0

    async def test_invalid_reason(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        response = await async_client.post(
            f"{COMMENTS}/{comment['id']}/report", headers=reader_headers, json={"reason_type": 9}
        )
        assert response.json()["code"] == 400


class TestAuthorActions:
    async def test_author_reply(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        url = f"{COMMENTS}/{comment['id']}/author-reply"

        note = payload(
            await async_client.post(url, headers=author_headers, json={"content": "Thank you!"})
        )
        assert note["author_user_id"] == "user-author"
        assert note["comment_id"] == comment["id"]

        denied = await async_client.post(url, headers=reader_headers, json={"content": "Me too"})
        assert denied.json()["code"] == 403

    async def test_only_target_author_pins_and_features(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        author_headers: dict,
    ):
        comment = await _comment(async_client, reader_headers, article_id)
        base = f"{COMMENTS}/{comment['id']}"

        assert (await async_client.post(f"{base}/pin", headers=reader_headers)).json()["code"] == 403

        payload(await async_client.post(f"{base}/feature", headers=author_headers))
        assert (await _get(async_client, comment["id"]))["is_featured"] is True

        payload(await async_client.delete(f"{base}/feature", headers=author_headers))
        payload(await async_client.post(f"{base}/pin", headers=author_headers))
        payload(await async_client.delete(f"{base}/pin", headers=author_headers))

        current = await _get(async_client, comment["id"])
        assert current["is_featured"] is False
        assert current["is_pinned"] is False

    async def test_non_article_targets_have_no_author(
        self, async_client: AsyncClient, reader_headers: dict
    ):
        comment = await _comment(async_client, reader_headers, 5, target_type=4)
        response = await async_client.post(
            f"{COMMENTS}/{comment['id']}/pin", headers=reader_headers
        )
        assert response.json()["code"] == 403
