from decimal import Decimal


class TestRedemptionRoutes:
    """환전 라우터 테스트"""

    def test_create_redemption(self, client, auth_headers, user_profile, fund):
        fund(user_profile.id, 1200)

        res = client.post(
            "/api/redemptions",
            json={
                "user_id": user_profile.id,
                "amount": "0.10",
                "coins_used": 1000,
                "method": "paypal",
                "paypal_email": "payee@example.com",
            },
            headers=auth_headers,
        )

        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["redemption"]["status"] == "pending"
        assert Decimal(str(body["redemption"]["amount"])) == Decimal("0.10")

        balance = client.get(
            f"/api/profiles/{user_profile.id}/balance", headers=auth_headers
        )
        assert balance.json()["coins"] == 200

    def test_insufficient_coins(self, client, auth_headers, user_profile, fund):
        fund(user_profile.id, 500)

        res = client.post(
            "/api/redemptions",
            json={
                "user_id": user_profile.id,
                "coins_used": 1000,
                "method": "giftcard",
            },
            headers=auth_headers,
        )

        assert res.status_code == 400
        assert res.json()["error"] == "Insufficient coins"

        listing = client.get(
            "/api/redemptions",
            params={"user_id": user_profile.id},
            headers=auth_headers,
        )
        assert listing.json() == {"redemptions": []}

    def test_requires_bearer(self, client, user_profile):
        res = client.post(
            "/api/redemptions",
            json={"user_id": user_profile.id, "coins_used": 1000, "method": "giftcard"},
        )
        assert res.status_code == 401

    def test_invalid_payload(self, client, auth_headers, user_profile):
        res = client.post(
            "/api/redemptions",
            json={"user_id": user_profile.id, "coins_used": 0, "method": "giftcard"},
            headers=auth_headers,
        )
        assert res.status_code == 422
        assert res.json()["code"] == "VALIDATION_001"

    def test_list_newest_first(self, client, auth_headers, user_profile, fund):
        fund(user_profile.id, 5000)
        for coins in (1000, 2500):
            client.post(
                "/api/redemptions",
                json={"user_id": user_profile.id, "coins_used": coins, "method": "giftcard"},
                headers=auth_headers,
            )

        res = client.get(
            "/api/redemptions",
            params={"user_id": user_profile.id},
            headers=auth_headers,
        )

        assert [r["coins_used"] for r in res.json()["redemptions"]] == [2500, 1000]

    def test_tiers(self, client):
        res = client.get("/api/redemptions/tiers")

        assert res.status_code == 200
        tiers = res.json()["tiers"]
        assert [tier["coins"] for tier in tiers] == [1000, 2500, 5000, 10000]
        assert tiers[0]["label"] == "$0.10"
