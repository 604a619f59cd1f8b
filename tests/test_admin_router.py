from decimal import Decimal

import pytest

from soundcoin.repositories.profile_repository import ProfileRepository


@pytest.fixture
def pending_redemption(client, auth_headers, user_profile, fund):
    fund(user_profile.id, 3000)
    res = client.post(
        "/api/redemptions",
        json={"user_id": user_profile.id, "coins_used": 2500, "method": "giftcard"},
        headers=auth_headers,
    )
    return res.json()["redemption"]


class TestAdminAccess:
    def test_stats_only_needs_bearer(self, client, auth_headers, user_profile, make_track, make_ad):
        make_track()
        make_ad()

        res = client.get("/api/admin/stats", headers=auth_headers)

        assert res.status_code == 200
        body = res.json()
        assert body["total_users"] == 1
        assert body["total_tracks"] == 1
        assert body["total_ads"] == 1
        assert body["pending_redemptions"] == 0

    def test_stats_requires_bearer(self, client):
        assert client.get("/api/admin/stats").status_code == 401

    def test_review_requires_admin_header(self, client, auth_headers):
        res = client.get("/api/admin/redemptions", headers=auth_headers)
        assert res.status_code == 403

    def test_review_rejects_non_admin(self, client, auth_headers, user_profile):
        res = client.get(
            "/api/admin/redemptions",
            headers={**auth_headers, "X-Admin-Id": user_profile.id},
        )
        assert res.status_code == 403
        assert res.json()["error"] == "Admin access required"


class TestAdminRedemptions:
    def test_list_by_status(self, client, admin_headers, pending_redemption):
        res = client.get(
            "/api/admin/redemptions", params={"status": "pending"}, headers=admin_headers
        )

        assert [r["id"] for r in res.json()["redemptions"]] == [pending_redemption["id"]]

    def test_approve_and_complete(
        self, client, admin_headers, admin_profile, user_profile, pending_redemption, db_session
    ):
        rid = pending_redemption["id"]

        approved = client.post(
            f"/api/admin/redemptions/{rid}/approve",
            json={"notes": "looks good"},
            headers=admin_headers,
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert approved.json()["processed_by"] == admin_profile.id
        assert approved.json()["notes"] == "looks good"

        completed = client.post(
            f"/api/admin/redemptions/{rid}/complete", headers=admin_headers
        )
        assert completed.json()["status"] == "completed"

        stats = client.get("/api/admin/stats", headers=admin_headers).json()
        assert Decimal(str(stats["total_paid_out_usd"])) == Decimal("0.25")
        assert stats["total_coins_earned"] == 3000
        assert ProfileRepository(db_session).get_by_id(user_profile.id).coins == 500

    def test_reject_keeps_balance_and_is_terminal(
        self, client, admin_headers, user_profile, pending_redemption, db_session
    ):
        rid = pending_redemption["id"]

        rejected = client.post(f"/api/admin/redemptions/{rid}/reject", headers=admin_headers)
        assert rejected.json()["status"] == "rejected"
        assert ProfileRepository(db_session).get_by_id(user_profile.id).coins == 500

        again = client.post(f"/api/admin/redemptions/{rid}/approve", headers=admin_headers)
        assert again.status_code == 409


class TestAdminCatalog:
    def test_create_and_deactivate_track(self, client, admin_headers):
        created = client.post(
            "/api/admin/tracks",
            json={
                "title": "Upload",
                "artist": "Admin",
                "audio_url": "https://cdn.example.test/upload.mp3",
                "genre": "lofi",
            },
            headers=admin_headers,
        )
        assert created.status_code == 201
        track = created.json()
        assert track["duration"] == 180

        deactivated = client.post(
            f"/api/admin/tracks/{track['id']}/deactivate", headers=admin_headers
        )
        assert deactivated.json()["active"] is False
        assert client.get("/api/tracks").json()["tracks"] == []

        listing = client.get("/api/admin/tracks", headers=admin_headers)
        assert len(listing.json()["tracks"]) == 1

    def test_create_and_deactivate_ad(self, client, admin_headers):
        created = client.post(
            "/api/admin/ads",
            json={
                "ad_type": "video",
                "title": "Sponsor",
                "content_url": "https://cdn.example.test/sponsor.mp4",
            },
            headers=admin_headers,
        )
        assert created.status_code == 201
        ad = created.json()
        assert ad["duration"] == 30
        assert ad["coin_reward"] is None

        client.post(f"/api/admin/ads/{ad['id']}/deactivate", headers=admin_headers)
        assert client.get("/api/ads/next", params={"kind": "video"}).json() == {"ad": None}
        assert len(client.get("/api/admin/ads", headers=admin_headers).json()["ads"]) == 1

    def test_deactivate_missing_ad(self, client, admin_headers):
        res = client.post("/api/admin/ads/999/deactivate", headers=admin_headers)
        assert res.status_code == 404

    def test_integrity_check(self, client, admin_headers, user_profile, fund):
        fund(user_profile.id, 12)

        res = client.get(
            f"/api/admin/users/{user_profile.id}/integrity", headers=admin_headers
        )

        assert res.json()["status"] == "OK"
        assert res.json()["calculated_balance"] == 12
