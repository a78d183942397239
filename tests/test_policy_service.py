"""Tests for the reference Policy Service."""

import pytest
from fastapi.testclient import TestClient

from netpolicy.authority import InMemoryPolicyAuthority
from netpolicy.authority import policy_service
from netpolicy.authority.policy_service import app


client = TestClient(app)


def policy_json(match_rule: str, subscriber_id=None, cycle_day: int = 1, warning: int = -1, limit: int = -1):
    return {
        "template": {"match_rule": match_rule, "subscriber_id": subscriber_id},
        "cycle_day": cycle_day,
        "warning_bytes": warning,
        "limit_bytes": limit,
    }


@pytest.fixture(autouse=True)
def fresh_store(monkeypatch):
    """Give each test an empty policy store."""
    store = InMemoryPolicyAuthority()
    monkeypatch.setattr(policy_service, "policy_store", store)
    return store


class TestPolicyServiceEndpoints:
    """Test Policy Service REST endpoints."""

    def test_health_check(self):
        """Test root health check endpoint."""
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["service"] == "Network Policy Service"
        assert data["status"] == "running"

    def test_get_policies_empty(self):
        """A new store has no policies."""
        response = client.get("/policies")
        assert response.status_code == 200
        assert response.json() == []

    def test_replace_then_get(self):
        """PUT replaces the list and GET returns it unchanged."""
        policies = [
            policy_json("MOBILE_ALL", "sub_1", cycle_day=5, warning=200, limit=1000),
            policy_json("WIFI"),
        ]

        response = client.put("/policies", json=policies)
        assert response.status_code == 200
        assert response.json() == {"status": "replaced", "count": 2}

        response = client.get("/policies")
        assert response.json() == policies

    def test_replace_is_full_replacement(self):
        """A second PUT drops policies missing from it."""
        client.put("/policies", json=[policy_json("WIFI"), policy_json("ETHERNET")])
        client.put("/policies", json=[policy_json("ETHERNET", limit=7)])

        data = client.get("/policies").json()
        assert data == [policy_json("ETHERNET", limit=7)]

    def test_duplicate_templates_rejected(self, fresh_store):
        """Two policies for one template are refused with 400."""
        response = client.put(
            "/policies",
            json=[policy_json("MOBILE_4G", "sub_1"), policy_json("MOBILE_4G", "sub_1", limit=5)],
        )

        assert response.status_code == 400
        assert "Duplicate" in response.json()["detail"]
        assert fresh_store.write_count == 0

    def test_invalid_policy_rejected(self):
        """Schema violations are refused with 422."""
        response = client.put("/policies", json=[policy_json("MOBILE_ALL", "sub_1", cycle_day=0)])
        assert response.status_code == 422

        response = client.put("/policies", json=[policy_json("SATELLITE")])
        assert response.status_code == 422

    def test_out_of_range_thresholds_stored_as_sent(self):
        """The service stores thresholds below -1; clamping is the editor's job."""
        client.put("/policies", json=[policy_json("WIFI", warning=-9, limit=-9)])

        data = client.get("/policies").json()
        assert data[0]["limit_bytes"] == -9

    def test_get_stats(self):
        """Test stats endpoint."""
        client.put("/policies", json=[
            policy_json("MOBILE_3G_LOWER", "sub_1"),
            policy_json("MOBILE_4G", "sub_1"),
            policy_json("MOBILE_ALL", "sub_2"),
            policy_json("WIFI"),
        ])

        response = client.get("/policies/stats")
        assert response.status_code == 200

        data = response.json()
        assert data["policy_count"] == 4
        assert data["subscribers_tracked"] == 2
        assert data["write_count"] == 1
