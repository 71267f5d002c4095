"""Tests for the public tracking projection."""

from datetime import UTC, datetime, timedelta

import pytest

from logistics.lifecycle.statuses import ShipmentStatus
from logistics.shipment.shipment import Shipment
from logistics.tracking.labels import status_label
from logistics.tracking.projection import is_valid_tracking_number, project, sanitize_description


def _shipment(status=ShipmentStatus.IN_TRANSIT):
    shipment = Shipment.create(
        tracking_number="SHP-20260302-00001",
        route={
            "origin_address": "12 Rue Carnot",
            "origin_city": "Dakar",
            "origin_country": "Senegal",
            "destination_address": "Avenue de l'Indépendance",
            "destination_city": "Bamako",
            "destination_country": "Mali",
        },
        cargo={"cargo_type": "FRAGILE", "weight": 42.5, "package_count": 3, "transport_modes": ["ROAD"]},
        client_id="client-acme",
        estimated_cost=250000.0,
    )
    shipment.status = status.value
    shipment.internal_notes = "Customs broker owes us a favour"
    return shipment


class TestProject:
    def test_draft_shipments_are_not_public(self):
        assert project(_shipment(ShipmentStatus.DRAFT)) is None

    def test_public_fields(self):
        view = project(_shipment(), "Acme Logistics")
        assert view.tracking_number == "SHP-20260302-00001"
        assert view.status_label == "In transit"
        assert view.origin_city == "Dakar"
        assert view.destination_country == "Mali"
        assert view.package_count == 3
        assert view.transport_modes == ["ROAD"]
        assert view.company_name == "Acme Logistics"

    def test_nothing_private_leaks(self):
        shipment = _shipment()
        shipment.add_tracking_point(
            location="Tambacounda",
            description="Crossed the border checkpoint",
            latitude=13.77,
            longitude=-13.67,
            internal_note="Driver paid an unofficial toll",
        )
        payload = project(shipment, "Acme Logistics").model_dump(by_alias=True, mode="json")
        text = str(payload)

        assert "estimatedCost" not in payload
        for leaked in ("12 Rue Carnot", "favour", "unofficial toll", "13.77", "client-acme", "latitude"):
            assert leaked not in text
        assert set(payload["events"][0]) == {"status", "statusLabel", "location", "timestamp", "description"}

    def test_events_are_ordered_by_time(self):
        shipment = _shipment()
        now = datetime.now(UTC)
        shipment.add_tracking_point(location="Kayes", occurred_at=now)
        shipment.add_tracking_point(location="Tambacounda", occurred_at=now - timedelta(hours=6))
        view = project(shipment)
        assert [event.location for event in view.events] == ["Tambacounda", "Kayes"]

    def test_camel_case_payload(self):
        payload = project(_shipment()).model_dump(by_alias=True)
        assert "trackingNumber" in payload
        assert "statusLabel" in payload


class TestTrackingNumberFormat:
    @pytest.mark.parametrize("number", ["SHP-20260302-00001", "SHP-20260302-A1B2C"])
    def test_valid(self, number):
        assert is_valid_tracking_number(number)

    @pytest.mark.parametrize(
        "number",
        ["", None, "shp-20260302-00001", "SHP-2026032-00001", "SHP-20260302-0001", "SHP-20260302-00001 ", "SHP/1"],
    )
    def test_invalid(self, number):
        assert not is_valid_tracking_number(number)


class TestSanitize:
    def test_strips_tags_and_control_characters(self):
        assert sanitize_description("<b>Arrived</b>\x00 at\n hub") == "Arrived at hub"

    def test_truncates(self):
        assert len(sanitize_description("x" * 900)) == 500

    def test_empty(self):
        assert sanitize_description("") is None
        assert sanitize_description("<br>") is None


def test_unknown_status_label_falls_back_to_the_raw_value():
    assert status_label("TELEPORTED") == "TELEPORTED"
    assert status_label(ShipmentStatus.AT_CUSTOMS) == "At customs"
