"""Backup and restore tests."""

import json

import pytest
from httpx import AsyncClient

from app.middleware.exceptions import FieldValidationError
from app.services.backup import parse_backup, restore_backup
from app.utils.numbering import InMemoryCounterStore


def _document(**overrides) -> dict:
    document = {
        "version": 1,
        "timestamp": "2024-03-10T08:00:00",
        "cards": [
            {
                "id": 17,
                "supplier_card_number": 41,
                "date": "2024-03-01",
                "farmer_name": "احمد علي",
                "supplier_name": "محمود فريد",
                "vehicle_number": "ABC 1",
                "gross_weight": 1000,
                "discount_percentage": 10,
                "discount_amount": 100,
                "net_weight": 900,
                "is_done": True,
            },
            {
                "id": 18,
                "supplier_card_number": 12,
                "date": "2024-03-02",
                "farmer_name": "سالم",
                "supplier_name": "بكر صقر",
                "vehicle_number": "ABC 2",
                "gross_weight": 500,
                "net_weight": 500,
            },
        ],
        "invoices": [],
    }
    document.update(overrides)
    return document


@pytest.mark.unit
class TestParseBackup:

    def test_accepts_json_text(self):
        document = parse_backup(json.dumps(_document(), ensure_ascii=False))
        assert len(document.cards) == 2

    def test_rejects_invalid_json(self):
        with pytest.raises(FieldValidationError):
            parse_backup("{not json")

    @pytest.mark.parametrize("raw", [
        [],
        {"version": 1},
        {"version": 1, "timestamp": "2024-03-10T08:00:00", "cards": {}, "invoices": []},
        {"timestamp": "2024-03-10T08:00:00", "cards": [], "invoices": []},
    ])
    def test_rejects_bad_shape(self, raw):
        with pytest.raises(FieldValidationError):
            parse_backup(raw)

    def test_rejects_newer_version(self):
        with pytest.raises(FieldValidationError):
            parse_backup(_document(version=2))

    @pytest.mark.parametrize("change", [
        {"farmer_name": "  "},
        {"vehicle_number": ""},
        {"vehicle_number": None},
        {"gross_weight": None},
        {"date": None},
    ])
    def test_rejects_card_missing_required_field(self, change):
        """Restored rows must carry what the intake form requires."""
        document = _document()
        card = {**document["cards"][0], **change}
        card = {key: value for key, value in card.items() if value is not None}
        document["cards"] = [card, document["cards"][1]]
        with pytest.raises(FieldValidationError) as exc_info:
            parse_backup(document)
        assert exc_info.value.field.startswith("cards.0.")

    def test_card_text_is_trimmed(self):
        document = _document()
        document["cards"][0]["farmer_name"] = "  احمد علي "
        assert parse_backup(document).cards[0].farmer_name == "احمد علي"


@pytest.mark.unit
class TestRestoreService:

    async def test_counters_raised_to_highest_restored_number(self, db_session):
        counters = InMemoryCounterStore({"بكر صقر": 20})
        summary = await restore_backup(db_session, _document(), counters=counters)
        assert (summary.cards, summary.invoices) == (2, 0)
        assert counters.current("محمود فريد") == 41
        # Never lowered
        assert counters.current("بكر صقر") == 20


@pytest.mark.api
@pytest.mark.asyncio
class TestBackupApi:

    async def test_backup_contains_everything(self, client: AsyncClient, make_card):
        card = await make_card()
        await client.post("/api/invoices/", json={"card_ids": [card["id"]]})

        data = (await client.get("/api/backup/")).json()
        assert data["version"] == 1
        assert len(data["cards"]) == 1
        assert len(data["invoices"]) == 1
        assert data["invoices"][0]["cards"][0]["id"] == card["id"]

    async def test_round_trip_through_restore(self, client: AsyncClient, make_card):
        card = await make_card(discount_percentage=10)
        await client.post("/api/invoices/", json={"card_ids": [card["id"]], "free_price": 2})
        document = (await client.get("/api/backup/")).json()

        response = await client.post("/api/backup/restore", json=document)
        assert response.json() == {"cards": 1, "invoices": 1}

        cards = (await client.get("/api/cards/")).json()["items"]
        assert cards[0]["supplier_card_number"] == 1
        assert cards[0]["net_weight"] == 900

        invoices = (await client.get("/api/invoices/")).json()["items"]
        assert invoices[0]["free_amount"] == 1800
        assert invoices[0]["cards"] == document["invoices"][0]["cards"]

    async def test_restore_continues_supplier_numbers(self, client: AsyncClient, make_card):
        response = await client.post("/api/backup/restore", json=_document())
        assert response.status_code == 200

        card = await make_card(supplier_name="محمود فريد")
        assert card["supplier_card_number"] == 42

    async def test_invalid_document_leaves_data_alone(self, client: AsyncClient, make_card):
        await make_card()
        response = await client.post("/api/backup/restore", json={"version": 1})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert (await client.get("/api/cards/")).json()["total"] == 1

    async def test_card_without_name_rejects_whole_restore(
        self, client: AsyncClient, make_card
    ):
        await make_card()
        document = _document()
        document["cards"][1]["farmer_name"] = " "
        response = await client.post("/api/backup/restore", json=document)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        cards = (await client.get("/api/cards/")).json()
        assert cards["total"] == 1
        assert cards["items"][0]["supplier_card_number"] == 1
