class TestAdRoutes:
    """광고 라우터 테스트"""

    def test_view_requires_bearer(self, client, user_profile, make_ad):
        ad = make_ad()
        res = client.post(
            "/api/ads/view",
            json={"ad_id": ad.id, "completed": True, "user_id": user_profile.id},
        )
        assert res.status_code == 401
        assert res.json()["error"] == "Unauthorized"

    def test_completed_view_awards_configured_reward(
        self, client, auth_headers, user_profile, make_ad, make_track
    ):
        ad = make_ad()
        track = make_track()

        res = client.post(
            "/api/ads/view",
            json={
                "ad_id": ad.id,
                "track_id": track.id,
                "completed": True,
                "user_id": user_profile.id,
            },
            headers=auth_headers,
        )

        assert res.status_code == 200
        assert res.json() == {"success": True, "coins_earned": 5}

        balance = client.get(
            f"/api/profiles/{user_profile.id}/balance", headers=auth_headers
        )
        assert balance.json()["coins"] == 5

    def test_incomplete_view_earns_nothing(
        self, client, auth_headers, user_profile, make_ad
    ):
        ad = make_ad(coin_reward=9)

        res = client.post(
            "/api/ads/view",
            json={"ad_id": ad.id, "completed": False, "user_id": user_profile.id},
            headers=auth_headers,
        )

        assert res.json() == {"success": True, "coins_earned": 0}

    def test_unknown_ad(self, client, auth_headers, user_profile):
        res = client.post(
            "/api/ads/view",
            json={"ad_id": 404, "completed": True, "user_id": user_profile.id},
            headers=auth_headers,
        )
        assert res.status_code == 404

    def test_next_ad_prefers_least_shown(self, client, make_ad):
        make_ad("audio", title="Busy", impressions=10)
        quiet = make_ad("audio", title="Quiet", impressions=2)
        make_ad("video", title="Video", impressions=0)

        res = client.get("/api/ads/next", params={"kind": "audio"})

        assert res.json()["ad"]["id"] == quiet.id

    def test_next_ad_none_available(self, client):
        res = client.get("/api/ads/next", params={"kind": "video"})
        assert res.json() == {"ad": None}
