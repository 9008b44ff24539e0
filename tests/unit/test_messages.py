"""Tests for app.services.messages -- customer-facing text."""
import pytest

from app.schemas.tracking import DeliveryEstimate, RouteProgress, TrackingData
from app.services.messages import (
    directions_url,
    maps_search_url,
    order_type,
    progress_bar,
    progress_timeline,
    render_help,
    render_order_details,
    render_order_not_found,
    render_tracking_message,
    render_verification_failed,
    render_verification_prompt,
    status_display,
    status_step,
)


def make_tracking(status: str = "OUT_FOR_DELIVERY", **overrides) -> TrackingData:
    data = dict(
        order_id=64531,
        status=status,
        status_step=status_step(status),
        address="12 Grove St, Jersey City, NJ",
        store_address="100 Newark Ave, Jersey City, NJ",
        store_name="iPerkz - Groceries",
        driver="Giga",
        zone="North",
        route="giga-north-1.19.26",
        delivery_seq=4,
        packed_by="Ravi",
        customer_name="Jane Doe",
        estimate=DeliveryEstimate(
            eta="24-39 min",
            stops_away=2,
            estimated_minutes=24,
            estimated_minutes_max=39,
            message="2 stops before you. Estimated arrival: 24-39 minutes.",
        ),
        route_progress=RouteProgress(
            route_id="giga-north-1.19.26",
            total_stops=5,
            completed_stops=2,
            pending_stops=3,
            current_stop_seq=3,
            current_stop_address="3 Route Ave",
            last_delivered_address="2 Route Ave",
            progress_percent=40,
        ),
        directions_url=directions_url("100 Newark Ave", "12 Grove St"),
    )
    data.update(overrides)
    return TrackingData(**data)


class TestStatus:

    def test_known_status(self):
        assert "Out for Delivery" in status_display("OUT_FOR_DELIVERY")

    def test_unknown_status_shown_raw(self):
        assert status_display("ON_HOLD") == "Status: ON_HOLD"

    def test_unknown_status_step(self):
        assert status_step("ON_HOLD") == 1

    def test_timeline_marks_current_stage(self):
        timeline = progress_timeline("COMPLETED")
        assert "✅ Order Placed" in timeline
        assert "✅ Packing" in timeline
        assert "➡️ **Ready** ⬅️ Current" in timeline
        assert "⬜ Delivered" in timeline

    def test_timeline_cancelled(self):
        assert progress_timeline("CANCELLED") == "❌ Order Cancelled"


class TestUrls:

    def test_maps_search_url_encodes_address(self):
        url = maps_search_url("12 Grove St, Jersey City")
        assert url == "https://www.google.com/maps/search/?api=1&query=12%20Grove%20St%2C%20Jersey%20City"

    def test_maps_search_url_missing_address(self):
        assert maps_search_url(None) is None

    def test_directions_url(self):
        url = directions_url("A St", "B St")
        assert url == (
            "https://www.google.com/maps/dir/?api=1&origin=A%20St"
            "&destination=B%20St&travelmode=driving"
        )

    @pytest.mark.parametrize("origin,destination", [(None, "B"), ("A", ""), (None, None)])
    def test_directions_url_needs_both_ends(self, origin, destination):
        assert directions_url(origin, destination) is None


class TestSmallHelpers:

    @pytest.mark.parametrize("take_out,expected", [
        (0, "Dine-in"),
        (1, "Take Out"),
        (2, "Delivery"),
        (None, "Unknown"),
    ])
    def test_order_type(self, take_out, expected):
        assert order_type(take_out) == expected

    def test_progress_bar(self):
        assert progress_bar(40) == "[████░░░░░░] 40%"

    def test_progress_bar_full(self):
        assert progress_bar(100) == "[██████████] 100%"


class TestTrackingMessage:

    def test_out_for_delivery(self, test_settings):
        text = render_tracking_message(make_tracking(), test_settings)

        assert "📦 **Order #64531**" in text
        assert "LIVE DELIVERY TRACKING" in text
        assert "**ETA: 24-39 min**" in text
        assert "The driver has 2 stops before yours." in text
        assert "**Progress:** 2/5 stops completed (40%)" in text
        assert "**Last Delivery:** 2 Route Ave" in text
        assert test_settings.driver_tracking_url in text

    def test_imminent(self, test_settings):
        estimate = DeliveryEstimate(
            eta="5-20 min",
            stops_away=0,
            estimated_minutes=5,
            estimated_minutes_max=20,
            imminent=True,
            message="Driver is heading to you now! Arriving in 5-20 minutes.",
        )
        text = render_tracking_message(make_tracking(estimate=estimate), test_settings)
        assert "You are NEXT!" in text

    def test_placed_order_has_no_driver_section(self, test_settings):
        tracking = make_tracking(
            status="PLACED",
            driver=None,
            zone=None,
            route=None,
            route_progress=None,
            estimate=DeliveryEstimate(eta="Pending", stops_away=None, message="Being processed."),
        )
        text = render_tracking_message(tracking, test_settings)
        assert "Awaiting packing" in text
        assert "**Driver:**" not in text

    def test_includes_order_details_when_given(self, test_settings, make_order):
        text = render_tracking_message(make_tracking(), test_settings, make_order())
        assert "• Toor Dal 4lb x2 @ $7.49 = $14.98" in text
        assert "**Subtotal:** $33.97" in text
        assert "**Order Type:** Delivery" in text
        assert "Photo will be available after delivery." in text

    def test_ends_with_follow_up(self, test_settings):
        text = render_tracking_message(make_tracking(), test_settings)
        assert text.endswith("Is there anything else I can help you with?")


class TestOrderDetails:

    def test_delivered_with_proof_photo(self, make_order):
        order = make_order(status="DELIVERED", imageUrl="https://cdn.test/proof.jpg")
        assert "📸 **Delivery Proof Photo:** https://cdn.test/proof.jpg" in render_order_details(order)

    def test_discount_only_when_positive(self, make_order):
        assert "Discount" not in render_order_details(make_order())
        assert "**Discount:** -$2.00" in render_order_details(make_order(discount=2))

    def test_no_items(self, make_order):
        assert "No items found" in render_order_details(make_order(menuList=None))


class TestVerificationMessages:

    def test_prompt_masks_customer_data(self, make_order):
        text = render_verification_prompt(64531, make_order())
        assert "**Order found for:** ***\n" in text
        assert "***-***-****" in text
        assert "***@***" in text
        assert "jane" not in text.lower()

    def test_name_mask_hides_length(self, make_order):
        short = render_verification_prompt(64531, make_order(first_name="Al"))
        long = render_verification_prompt(64531, make_order(first_name="Bartholomew"))
        assert short == long

    def test_prompt_without_contact_data(self, make_order):
        text = render_verification_prompt(64531, make_order(phone=None, email=None, first_name=None))
        assert "**Order found for:** ***" in text
        assert "**Phone on file:** N/A" in text

    def test_failed_mentions_support(self, test_settings):
        text = render_verification_failed("64531", test_settings)
        assert "#64531" in text
        assert test_settings.support_email in text

    def test_not_found(self, test_settings):
        assert "couldn't find order #123" in render_order_not_found("123", test_settings)

    def test_help_keeps_blank_lines(self):
        assert "\n\n" in render_help()
