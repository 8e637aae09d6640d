"""Integration tests for report review, the sensitive word list and batch actions."""
import pytest
from httpx import AsyncClient

from conftest import bearer, payload

pytestmark = pytest.mark.asyncio

COMMENTS = "/api/v3/comments"
REPORTS = "/api/v3/reports"
WORDS = "/api/v3/sensitive-words"


@pytest.fixture
async def comment_id(async_client: AsyncClient, article_id: int, reader_headers: dict) -> int:
    response = await async_client.post(
        f"{COMMENTS}/root",
        headers=reader_headers,
        json={"target_type": 1, "target_id": article_id, "content": "A perfectly fine comment."},
    )
    return payload(response)["id"]


@pytest.fixture
async def report_id(async_client: AsyncClient, comment_id: int, make_user) -> int:
    response = await async_client.post(
        f"{COMMENTS}/{comment_id}/report",
        headers=await make_user("user-snitch"),
        json={"reason_type": 1, "reason_desc": "looks like spam"},
    )
    return payload(response)["id"]


class TestAccess:
    async def test_requires_login(self, async_client: AsyncClient):
        response = await async_client.get(f"{REPORTS}/pending")
        assert response.json()["code"] == 401

    async def test_requires_admin(self, async_client: AsyncClient, reader_headers: dict):
        for method, url in (("GET", f"{REPORTS}/pending"), ("GET", WORDS)):
            response = await async_client.request(method, url, headers=reader_headers)
            assert response.json()["code"] == 403

        response = await async_client.post(
            f"{COMMENTS}/batch-fold", headers=reader_headers, json={"comment_ids": [1]}
        )
        assert response.json()["code"] == 403

    async def test_role_claim_in_token_is_ignored(self, async_client: AsyncClient, users):
        forged = bearer("user-reader", role="admin")
        response = await async_client.get(f"{REPORTS}/pending", headers=forged)
        assert response.json()["code"] == 403

    async def test_unknown_user_rejected(self, async_client: AsyncClient, users):
        response = await async_client.get(
            f"{REPORTS}/pending", headers=bearer("user-ghost", role="admin")
        )
        assert response.json() == {"code": 401, "message": "User not found", "data": None}

    async def test_suspended_user_rejected(
        self, async_client: AsyncClient, db_session, users, admin_headers: dict
    ):
        users["admin"].status = "suspended"
        await db_session.commit()

        response = await async_client.get(f"{REPORTS}/pending", headers=admin_headers)
        body = response.json()
        assert body["code"] == 401
        assert body["message"] == "User account is not active"


class TestReports:
    async def test_pending_list(
        self, async_client: AsyncClient, admin_headers: dict, report_id: int, comment_id: int
    ):
        data = payload(await async_client.get(f"{REPORTS}/pending", headers=admin_headers))
        assert data["total"] == 1
        report = data["reports"][0]
        assert report["id"] == report_id
        assert report["comment_id"] == comment_id
        assert report["status"] == 0

    async def test_upheld_report_deletes_comment(
        self, async_client: AsyncClient, admin_headers: dict, report_id: int, comment_id: int
    ):
        url = f"{REPORTS}/{report_id}/handle"
        report = payload(
            await async_client.post(
                url, headers=admin_headers, json={"result": "Spam confirmed", "approved": True}
            )
        )
        assert report["status"] == 1
        assert report["handle_user_id"] == "user-admin"
        assert report["handle_result"] == "Spam confirmed"
        assert report["handle_time"] is not None

        assert (await async_client.get(f"{COMMENTS}/{comment_id}")).json()["code"] == 404
        pending = payload(await async_client.get(f"{REPORTS}/pending", headers=admin_headers))
        assert pending["total"] == 0

        again = await async_client.post(
            url, headers=admin_headers, json={"result": "Twice", "approved": True}
        )
        assert again.json()["code"] == 409

    async def test_rejected_report_keeps_comment(
        self, async_client: AsyncClient, admin_headers: dict, report_id: int, comment_id: int
    ):
        report = payload(
            await async_client.post(
                f"{REPORTS}/{report_id}/handle",
                headers=admin_headers,
                json={"result": "Not spam"},
            )
        )
        assert report["status"] == 2
        assert payload(await async_client.get(f"{COMMENTS}/{comment_id}"))["status"] == 1

    async def test_missing_report(self, async_client: AsyncClient, admin_headers: dict):
        response = await async_client.post(
            f"{REPORTS}/999/handle", headers=admin_headers, json={"result": "n/a"}
        )
        assert response.json()["code"] == 404

    async def test_result_is_required(
        self, async_client: AsyncClient, admin_headers: dict, report_id: int
    ):
        response = await async_client.post(
            f"{REPORTS}/{report_id}/handle", headers=admin_headers, json={"approved": True}
        )
        assert response.json()["code"] == 400


class TestSensitiveWords:
    async def test_add_and_list(self, async_client: AsyncClient, admin_headers: dict):
        created = payload(
            await async_client.post(
                WORDS,
                headers=admin_headers,
                json={"word": " scam ", "level": 2, "action": 3, "replacement": "***"},
            )
        )
        assert created["word"] == "scam"
        assert created["level"] == 2
        assert created["action"] == 3
        assert created["is_enabled"] is True

        words = payload(await async_client.get(WORDS, headers=admin_headers))
        assert [w["word"] for w in words] == ["scam"]

    async def test_duplicate_word(self, async_client: AsyncClient, admin_headers: dict):
        payload(await async_client.post(WORDS, headers=admin_headers, json={"word": "scam"}))
        response = await async_client.post(WORDS, headers=admin_headers, json={"word": "scam"})
        assert response.json()["code"] == 409

    async def test_blank_word(self, async_client: AsyncClient, admin_headers: dict):
        response = await async_client.post(WORDS, headers=admin_headers, json={"word": "   "})
        assert response.json()["code"] == 400

    async def test_out_of_range_level(self, async_client: AsyncClient, admin_headers: dict):
        response = await async_client.post(
            WORDS, headers=admin_headers, json={"word": "scam", "level": 7}
        )
        assert response.json()["code"] == 400


class TestBatchActions:
    async def _post_three(self, client: AsyncClient, headers: dict, article_id: int) -> list[int]:
        ids = []
        for n in range(3):
            response = await client.post(
                f"{COMMENTS}/root",
                headers=headers,
                json={"target_type": 1, "target_id": article_id, "content": f"Comment number {n}"},
            )
            ids.append(payload(response)["id"])
        return ids

    async def test_batch_delete(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        admin_headers: dict,
    ):
        ids = await self._post_three(async_client, reader_headers, article_id)

        result = payload(
            await async_client.post(
                f"{COMMENTS}/batch-delete",
                headers=admin_headers,
                json={"comment_ids": [ids[0], ids[1], ids[1], 999]},
            )
        )
        assert result["affected"] == 2

        article = payload(await async_client.get(f"/api/v3/articles/{article_id}"))
        assert article["article"]["comment_count"] == 1

    async def test_batch_fold(
        self,
        async_client: AsyncClient,
        article_id: int,
        reader_headers: dict,
        admin_headers: dict,
    ):
        ids = await self._post_three(async_client, reader_headers, article_id)

        result = payload(
            await async_client.post(
                f"{COMMENTS}/batch-fold", headers=admin_headers, json={"comment_ids": ids[:2]}
            )
        )
        assert result["affected"] == 2

        roots = payload(
            await async_client.get(
                f"{COMMENTS}/root", params={"target_type": 1, "target_id": article_id}
            )
        )
        assert [c["id"] for c in roots["comments"]] == [ids[2]]

        refold = payload(
            await async_client.post(
                f"{COMMENTS}/batch-fold", headers=admin_headers, json={"comment_ids": ids[:2]}
            )
        )
        assert refold["affected"] == 0

    async def test_empty_batch_rejected(self, async_client: AsyncClient, admin_headers: dict):
        response = await async_client.post(
            f"{COMMENTS}/batch-delete", headers=admin_headers, json={"comment_ids": []}
        )
        assert response.json()["code"] == 400
