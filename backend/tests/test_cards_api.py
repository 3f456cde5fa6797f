"""Card endpoint tests."""

import pytest
from httpx import AsyncClient


@pytest.mark.api
@pytest.mark.asyncio
class TestCardCreate:
    """POST /api/cards/"""

    async def test_create_with_percentage(self, make_card):
        """Percentage driver derives amount and net weight."""
        card = await make_card(discount_percentage=10)
        assert card["id"] == 1
        assert card["supplier_card_number"] == 1
        assert card["discount_amount"] == 100
        assert card["net_weight"] == 900
        assert card["is_done"] is False

    async def test_create_with_net_weight(self, make_card):
        card = await make_card(net_weight=900)
        assert card["discount_amount"] == 100
        assert card["discount_percentage"] == 10

    async def test_create_without_driver_means_no_discount(self, make_card):
        card = await make_card()
        assert card["discount_percentage"] == 0
        assert card["discount_amount"] == 0
        assert card["net_weight"] == 1000

    async def test_supplier_numbers_are_independent(self, make_card):
        first = await make_card(supplier_name="بكر صقر")
        second = await make_card(supplier_name=" بكر صقر ")
        other = await make_card(supplier_name="محمود فريد")
        assert first["supplier_card_number"] == 1
        assert second["supplier_card_number"] == 2
        assert second["supplier_name"] == "بكر صقر"
        assert other["supplier_card_number"] == 1

    async def test_blank_farmer_name_rejected(self, client: AsyncClient):
        response = await client.post("/api/cards/", json={
            "farmer_name": "   ", "vehicle_number": "1", "gross_weight": 100,
        })
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_non_numeric_weight_rejected(self, client: AsyncClient):
        response = await client.post("/api/cards/", json={
            "farmer_name": "احمد", "vehicle_number": "1", "gross_weight": "كثير",
        })
        assert response.status_code == 422

    async def test_two_drivers_rejected(self, client: AsyncClient):
        response = await client.post("/api/cards/", json={
            "farmer_name": "احمد",
            "vehicle_number": "1",
            "gross_weight": 1000,
            "discount_percentage": 10,
            "net_weight": 900,
        })
        assert response.status_code == 422

    async def test_net_weight_above_gross_rejected(self, client: AsyncClient):
        response = await client.post("/api/cards/", json={
            "farmer_name": "احمد",
            "vehicle_number": "1",
            "gross_weight": 1000,
            "net_weight": 1200,
        })
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"] == {"field": "net_weight"}


@pytest.mark.api
@pytest.mark.asyncio
class TestCardEdit:
    """GET / PATCH / DELETE /api/cards/{id}"""

    async def test_get_missing_card(self, client: AsyncClient):
        response = await client.get("/api/cards/999")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_gross_change_keeps_percentage(self, client: AsyncClient, make_card):
        card = await make_card(discount_percentage=10)
        response = await client.patch(f"/api/cards/{card['id']}", json={"gross_weight": 2000})
        assert response.status_code == 200
        data = response.json()
        assert data["discount_percentage"] == 10
        assert data["discount_amount"] == 200
        assert data["net_weight"] == 1800
        assert data["supplier_card_number"] == card["supplier_card_number"]

    async def test_new_driver_on_edit(self, client: AsyncClient, make_card):
        card = await make_card(discount_percentage=10)
        response = await client.patch(f"/api/cards/{card['id']}", json={"net_weight": 750})
        data = response.json()
        assert data["discount_amount"] == 250
        assert data["discount_percentage"] == 25

    async def test_edit_names_only(self, client: AsyncClient, make_card):
        card = await make_card(discount_percentage=10)
        response = await client.patch(
            f"/api/cards/{card['id']}", json={"farmer_name": "محمود", "supplier_name": "بكر صقر"},
        )
        data = response.json()
        assert data["farmer_name"] == "محمود"
        assert data["net_weight"] == 900

    async def test_toggle_done(self, client: AsyncClient, make_card):
        card = await make_card()
        response = await client.patch(f"/api/cards/{card['id']}/done", json={"is_done": True})
        assert response.json()["is_done"] is True

    async def test_delete_card(self, client: AsyncClient, make_card):
        card = await make_card()
        response = await client.delete(f"/api/cards/{card['id']}")
        assert response.status_code == 204
        assert (await client.get(f"/api/cards/{card['id']}")).status_code == 404

    async def test_delete_all_keeps_supplier_sequence(self, client: AsyncClient, make_card):
        """Supplier numbers carry on after every card is deleted."""
        await make_card(supplier_name="بكر صقر")
        await make_card(supplier_name="بكر صقر")

        response = await client.delete("/api/cards/")
        assert response.json() == {"deleted": 2}
        assert (await client.get("/api/cards/")).json()["total"] == 0

        card = await make_card(supplier_name="بكر صقر")
        assert card["supplier_card_number"] == 3
        assert card["id"] == 3


@pytest.mark.api
@pytest.mark.asyncio
class TestCardList:
    """GET /api/cards/, search, suggestions, suppliers, weight preview"""

    async def test_list_with_supplier_filter_and_totals(self, client: AsyncClient, make_card):
        await make_card(supplier_name="بكر صقر", discount_percentage=10)
        await make_card(supplier_name="بكر صقر", gross_weight=500)
        await make_card(supplier_name="محمود فريد")

        response = await client.get("/api/cards/", params={"supplier": " بكر صقر "})
        data = response.json()
        assert data["total"] == 2
        assert [c["id"] for c in data["items"]] == [1, 2]
        assert data["total_gross_weight"] == 1500
        assert data["total_net_weight"] == 1400

    async def test_search_numeric_precedence(self, client: AsyncClient, make_card):
        for i in range(1, 8):
            name = "احمد 7" if i == 2 else f"مزارع {i}"
            await make_card(farmer_name=name, vehicle_number=f"ABC {i}")
        # Vehicle "ABC 7" also belongs to card 7
        response = await client.get("/api/cards/search", params={"q": "7"})
        assert [c["id"] for c in response.json()] == [7]

    async def test_search_by_name_variant(self, client: AsyncClient, make_card):
        await make_card(farmer_name="إبراهيم السيد")
        await make_card(farmer_name="محمود")
        response = await client.get("/api/cards/search", params={"q": "ابراهيم"})
        assert [c["farmer_name"] for c in response.json()] == ["إبراهيم السيد"]

    async def test_search_with_date(self, client: AsyncClient, make_card):
        await make_card(date="2024-03-01")
        await make_card(date="2024-03-02")
        response = await client.get(
            "/api/cards/search", params={"q": "احمد", "date": "2024-03-02"}
        )
        assert [c["id"] for c in response.json()] == [2]

    async def test_suggestions(self, client: AsyncClient, make_card):
        await make_card(farmer_name="احمد علي")
        await make_card(farmer_name="احمد")
        response = await client.get("/api/cards/suggestions", params={"q": "أحمد"})
        assert response.json() == ["احمد", "احمد علي"]

    async def test_known_suppliers(self, client: AsyncClient):
        response = await client.get("/api/cards/suppliers")
        assert len(response.json()) == 7
        assert "بكر صقر" in response.json()

    async def test_weight_preview(self, client: AsyncClient):
        response = await client.post("/api/cards/weights/preview", json={
            "gross_weight": 1000, "mode": "by_net_weight", "value": 900,
        })
        data = response.json()
        assert data["discount_amount"] == 100
        assert data["discount_percentage"] == 10
        assert data["out_of_range"] is False

    async def test_weight_preview_out_of_range(self, client: AsyncClient):
        response = await client.post("/api/cards/weights/preview", json={
            "gross_weight": 1000, "mode": "by_amount", "value": 1500,
        })
        data = response.json()
        assert data["out_of_range"] is True
        assert data["net_weight"] is None
