"""
OwlDoor CRM - Client list filter engine + eligibility
"""

import pytest

from models.client import ClientFilterParams
from services.client_filters import (
    active_filter_count,
    eligibility_status,
    filter_clients,
    is_eligible,
    list_clients,
)


def _clients():
    return [
        {
            "id": "acme", "company_name": "Acme Realty", "contact_name": "Ann Park",
            "email": "ann@acme.com", "active": True, "credits_balance": 50,
            "has_payment_method": True, "current_package_id": "p1",
            "cities": ["Austin"], "states": ["TX"], "zip_codes": ["78701"],
        },
        {
            "id": "bolt", "company_name": "Bolt Mortgage", "contact_name": "Ben Ortiz",
            "email": "ben@bolt.io", "active": False, "credits_balance": 0,
            "has_payment_method": False, "custom_package_id": "cp9",
            "cities": ["Denver"], "states": ["CO"], "zip_codes": ["80202"],
        },
        {
            "id": "cove", "company_name": "Cove Homes", "contact_name": "Cara Diaz",
            "email": "cara@cove.com", "active": True, "credits_balance": -5,
            "has_payment_method": True, "current_package_id": None,
            "cities": ["San Diego"], "states": ["CA"], "zip_codes": ["92101"],
        },
    ]


def _ids(clients):
    return [c["id"] for c in clients]


class TestFilters:

    def test_package_and_status(self):
        """has_package AND active -> only the first record"""
        clients = [
            {"id": "a", "active": True, "current_package_id": "p1"},
            {"id": "b", "active": False, "current_package_id": "p1"},
            {"id": "c", "active": True, "current_package_id": None},
        ]
        params = ClientFilterParams(package=["has_package"], status=["active"])
        assert _ids(filter_clients(clients, params)) == ["a"]

    def test_no_filters_pass_everything(self):
        assert _ids(filter_clients(_clients(), ClientFilterParams())) == ["acme", "bolt", "cove"]

    def test_or_within_category(self):
        params = ClientFilterParams(status=["active", "inactive"])
        assert len(filter_clients(_clients(), params)) == 3

    def test_custom_package_counts_as_package(self):
        params = ClientFilterParams(package=["has_package"])
        assert _ids(filter_clients(_clients(), params)) == ["acme", "bolt"]

    def test_search_fields(self):
        assert _ids(filter_clients(_clients(), ClientFilterParams(search="BOLT"))) == ["bolt"]
        assert _ids(filter_clients(_clients(), ClientFilterParams(search="cara"))) == ["cove"]
        assert _ids(filter_clients(_clients(), ClientFilterParams(search="@acme"))) == ["acme"]

    def test_location_city_state_zip(self):
        assert _ids(filter_clients(_clients(), ClientFilterParams(location="tx"))) == ["acme"]
        assert _ids(filter_clients(_clients(), ClientFilterParams(location="san"))) == ["cove"]
        assert _ids(filter_clients(_clients(), ClientFilterParams(location="802"))) == ["bolt"]

    def test_payment_and_credits(self):
        params = ClientFilterParams(payment=["needs_card"])
        assert _ids(filter_clients(_clients(), params)) == ["bolt"]
        params = ClientFilterParams(credits=["no_credits"])
        assert _ids(filter_clients(_clients(), params)) == ["bolt", "cove"]

    def test_categories_are_anded(self):
        params = ClientFilterParams(status=["active"], credits=["no_credits"], location="CA")
        assert _ids(filter_clients(_clients(), params)) == ["cove"]

    def test_active_filter_count(self):
        params = ClientFilterParams(package=["has_package", "no_package"], credits=["has_credits"], location="TX")
        assert active_filter_count(params) == 4
        assert active_filter_count(ClientFilterParams()) == 0


class TestEligibility:

    def test_active_with_credits(self):
        acme = _clients()[0]
        assert is_eligible(acme) is True
        assert eligibility_status(acme) == {"eligible": True, "reasons": ["Ready for auto-buy"]}

    def test_payment_method_is_optional(self):
        client = {"active": True, "credits_balance": 5, "has_payment_method": False}
        status = eligibility_status(client)
        assert status["eligible"] is True
        assert status["reasons"] == ["No payment method"]

    def test_every_reason(self):
        status = eligibility_status(_clients()[1])
        assert status["eligible"] is False
        assert status["reasons"] == ["Inactive account", "No credits", "No payment method"]

    def test_recomputed_from_current_state(self):
        client = {"active": True, "credits_balance": 1}
        assert is_eligible(client)
        client["credits_balance"] = 0
        assert not is_eligible(client)


class TestListClients:

    @pytest.mark.asyncio
    async def test_rows_carry_eligibility(self, store, fake_db):
        fake_db.seed("clients", *_clients())
        result = await list_clients(ClientFilterParams(status=["active"]))

        assert result["count"] == 2
        assert result["total"] == 3
        assert result["active_filter_count"] == 1
        assert all("eligibility" in row for row in result["clients"])
