"""
Customer-facing text rendering.

Pure functions from data to markdown-ish chat text; nothing here touches
the cache or session store.
"""
from typing import Optional
from urllib.parse import quote

from app.core.config import Settings
from app.models.enums import OrderStatus
from app.schemas.order import Order
from app.schemas.tracking import RouteProgress, TrackingData

DIVIDER = "━" * 22

_STATUS_DISPLAY = {
    OrderStatus.PLACED: "📦 Order Placed - Being processed",
    OrderStatus.STARTED: "📦 Packing Started - Your order is being packed",
    OrderStatus.COMPLETED: "✅ Ready for Delivery - Your order is packed",
    OrderStatus.OUT_FOR_DELIVERY: "🚚 Out for Delivery - On the way!",
    OrderStatus.DELIVERED: "✅ Delivered - Enjoy your groceries!",
    OrderStatus.CANCELLED: "❌ Cancelled",
}

_TIMELINE_STAGES = ("Order Placed", "Packing", "Ready", "Out for Delivery", "Delivered")

_ORDER_TYPES = {0: "Dine-in", 1: "Take Out", 2: "Delivery"}


def status_display(status: str) -> str:
    try:
        return _STATUS_DISPLAY[OrderStatus(status)]
    except ValueError:
        return f"Status: {status}"


def status_step(status: str) -> int:
    """Timeline step 1-5, 0 for cancelled, 1 for anything unknown."""
    try:
        return OrderStatus(status).step
    except ValueError:
        return 1


def progress_timeline(status: str) -> str:
    if status == OrderStatus.CANCELLED:
        return "❌ Order Cancelled"

    step = status_step(status)
    lines = ["**Order Progress:**"]
    for number, stage in enumerate(_TIMELINE_STAGES, start=1):
        if number < step:
            lines.append(f"✅ {stage}")
        elif number == step:
            lines.append(f"➡️ **{stage}** ⬅️ Current")
        else:
            lines.append(f"⬜ {stage}")
    return "\n".join(lines)


def maps_search_url(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    return f"https://www.google.com/maps/search/?api=1&query={quote(address, safe='')}"


def directions_url(origin: Optional[str], destination: Optional[str]) -> Optional[str]:
    if not origin or not destination:
        return None
    return (
        "https://www.google.com/maps/dir/?api=1"
        f"&origin={quote(origin, safe='')}"
        f"&destination={quote(destination, safe='')}"
        "&travelmode=driving"
    )


def order_type(take_out: Optional[int]) -> str:
    return _ORDER_TYPES.get(take_out, "Unknown")


def progress_bar(percent: int) -> str:
    filled = max(0, min(10, percent // 10))
    return f"[{'█' * filled}{'░' * (10 - filled)}] {percent}%"


def _section(title: str, body: str) -> str:
    return f"{DIVIDER}\n{title}\n{DIVIDER}\n{body}"


def _join(*lines) -> str:
    """Join lines, dropping None/False from conditional ``x and "..."`` lines."""
    return "\n".join(line for line in lines if isinstance(line, str))


def render_route_progress(progress: RouteProgress) -> str:
    return _join(
        f"**Route:** {progress.route_id}",
        f"**Progress:** {progress.completed_stops}/{progress.total_stops} stops "
        f"completed ({progress.progress_percent}%)",
        f"**Driver Currently At:** {progress.current_stop_address or 'Starting route'}",
        progress.last_delivered_address and f"**Last Delivery:** {progress.last_delivered_address}",
        progress_bar(progress.progress_percent),
    )


def render_delivery_tracking(tracking: TrackingData, settings: Settings) -> str:
    """Delivery section of the tracking message, by status."""
    estimate = tracking.estimate
    location = _join(
        "📍 **Delivery Location:**",
        tracking.address or "N/A",
        maps_search_url(tracking.address) and f"🗺️ View on Map: {maps_search_url(tracking.address)}",
        tracking.directions_url and f"🚗 Get Directions: {tracking.directions_url}",
    )

    if tracking.status == OrderStatus.PLACED:
        body = _join(
            "**Packing Status:** ⏳ Awaiting packing",
            "**Driver Assignment:** ⏳ Not yet assigned",
            "**Route:** ⏳ Pending route optimization",
            "",
            f"⏱️ **Estimated Delivery:**\n{estimate.message}",
            location,
        )
        return _section("🚚 **Delivery Tracking**", body)

    if tracking.status == OrderStatus.STARTED:
        packer = f" by {tracking.packed_by}" if tracking.packed_by else ""
        body = _join(
            f"**Packing Status:** 📦 Being packed{packer}",
            "**Driver Assignment:** ⏳ Pending",
            "**Route:** ⏳ Will be assigned after packing",
            f"⏱️ **Estimated Delivery:**\n{estimate.message}",
            location,
        )
        return _section("🚚 **Delivery Tracking**", body)

    if tracking.driver is None:
        return ""

    assignment = _join(
        f"**Packed By:** {tracking.packed_by or 'N/A'}",
        f"**Driver:** {tracking.driver}",
        f"**Delivery Zone:** {tracking.zone}",
        f"**Route ID:** {tracking.route}",
        f"**Your Stop:** #{tracking.delivery_seq} in route",
    )
    live_route = render_route_progress(tracking.route_progress) if tracking.route_progress else None

    if tracking.status == OrderStatus.OUT_FOR_DELIVERY:
        if estimate.imminent:
            stops_line = "🎉 You are NEXT!"
        else:
            plural = "s" if (estimate.stops_away or 0) > 1 else ""
            stops_line = f"The driver has {estimate.stops_away} stop{plural} before yours."
        body = _join(
            "🟢 **Your order is on the way!**",
            f"⏱️ **ETA: {estimate.eta}**",
            estimate.message,
            assignment,
            location,
            f"🔴 **TRACK DRIVER LIVE:**\n{settings.driver_tracking_url}",
            f"📊 **Route Progress:**\n{stops_line}",
            live_route,
        )
        return _section("🚚 **LIVE DELIVERY TRACKING**", body)

    body = _join(
        estimate.message,
        assignment,
        live_route,
        location,
        f"🚗 **Driver Tracking Portal:**\n{settings.driver_tracking_url}",
    )
    return _section("🚚 **Delivery Tracking**", body)


def render_order_details(order: Order) -> str:
    """Customer, items and payment sections for a verified order."""
    items = "\n".join(
        f"• {item.name} x{item.quantity} @ ${item.sale_price or 0:.2f} = ${item.line_total:.2f}"
        for item in order.line_items
    )
    subtotal = sum(item.line_total for item in order.line_items)

    customer = _join(
        f"**Name:** {order.customer_name}",
        f"**Phone:** {order.phone or 'N/A'}",
        f"**Email:** {order.email or 'N/A'}",
        f"**Address:** {order.address or 'N/A'}",
    )
    details = _join(
        f"**Order Date:** {order.created_at or 'N/A'}",
        f"**Order Type:** {order_type(order.take_out)}",
        f"**Platform:** {order.company or 'iPerkz'}",
        f"**Scheduled Delivery:** {order.scheduled_delivery or 'Pending'}",
        order.delivery_instructions and f"**Delivery Instructions:** {order.delivery_instructions}",
        order.special_instructions and f"**Special Instructions:** {order.special_instructions}",
    )
    payment = _join(
        f"**Subtotal:** ${subtotal:.2f}",
        f"**Tax:** ${order.tax or 0:.2f}",
        f"**Delivery Fee:** ${order.delivery_amount or 0:.2f}",
        f"**Tip:** ${order.tip_amount or 0:.2f}",
        (order.discount or 0) > 0 and f"**Discount:** -${order.discount:.2f}",
        (order.perkz_amount or 0) > 0 and f"**Perkz Used:** -${order.perkz_amount:.2f}",
        f"**Transaction Fee:** ${order.transaction_fee or 0:.2f}",
        f"**Total Charged:** ${order.total_sale_price or 0:.2f}",
        f"**Payment Method:** {order.payment_mode or 'N/A'}",
    )

    if order.status == OrderStatus.DELIVERED:
        proof = (
            f"📸 **Delivery Proof Photo:** {order.image_url}"
            if order.image_url
            else "📸 **Delivery Proof:** Photo not available for this order."
        )
    elif order.status == OrderStatus.OUT_FOR_DELIVERY:
        proof = "📸 **Delivery Proof:** Photo will be available after delivery."
    else:
        proof = None

    return "\n\n".join(
        part
        for part in (
            _section("👤 **Customer Details**", customer),
            _section("🏪 **Store Details**", _join(
                f"**Store:** {order.store_name or 'iPerkz - Groceries'}",
                f"**Store Address:** {order.store_address or 'N/A'}",
            )),
            _section("📋 **Order Details**", details),
            _section(f"🛒 **Items Ordered ({len(order.line_items)})**", items or "No items found"),
            _section("💰 **Payment Summary**", payment),
            proof,
        )
        if part
    )


def render_tracking_message(
    tracking: TrackingData,
    settings: Settings,
    order: Optional[Order] = None,
) -> str:
    """Full chat reply for a verified order."""
    parts = [
        f"📦 **Order #{tracking.order_id}**",
        status_display(tracking.status),
        _section("📊 **Order Progress**", progress_timeline(tracking.status)),
        render_delivery_tracking(tracking, settings),
    ]
    if order is not None:
        parts.append(render_order_details(order))
    parts.append(
        _section(
            "📱 **Track Your Order**",
            _join(
                "Download the iPerkz app for real-time tracking!",
                f"• iOS: {settings.ios_app_url}",
                f"• Android: {settings.android_app_url}",
            ),
        )
    )
    parts.append("Is there anything else I can help you with?")
    return "\n\n".join(part for part in parts if part)


def mask(value: Optional[str], placeholder: str) -> str:
    return placeholder if value else "N/A"


def render_verification_prompt(order_id: int, order: Order) -> str:
    return _join(
        "🔐 **Verification Required**",
        "",
        f"For your security, I need to verify you own order #{order_id}.",
        "",
        "**Order found for:** ***",
        f"**Phone on file:** {mask(order.phone, '***-***-****')}",
        f"**Email on file:** {mask(order.email, '***@***')}",
        "",
        "Please reply with ONE of the following to verify:",
        "• Your **phone number** (or last 4 digits)",
        "• Your **email address**",
        "• Your **first name**, **last name** or **full name**",
    )


def render_verification_success(body: str) -> str:
    return f"✅ **Verification Successful!**\n\nThank you for verifying your identity.\n\n{body}"


def render_verification_failed(order_id: str, settings: Settings) -> str:
    return _join(
        "❌ **Verification Failed**",
        "",
        f"The information provided doesn't match our records for order #{order_id}.",
        "",
        "**Please try again with:**",
        "• Your phone number (or last 4 digits)",
        "• Your email address",
        "• Your name as it appears on the order",
        "",
        f"📧 Need help? Contact {settings.support_email}",
    )


def render_order_not_found(order_id: str, settings: Settings) -> str:
    return _join(
        f"📦 **Order #{order_id}**",
        "",
        f"I couldn't find order #{order_id} in our system. This could mean:",
        "• The order ID may be incorrect",
        "• The order is still being processed",
        "• The order may be from a different store",
        "",
        f"📧 **Support:** {settings.support_email}",
        "",
        "Would you like to try a different order ID?",
    )


def render_help() -> str:
    return _join(
        "To track your order, I'll need your Order ID. You can find it in:",
        "• Your order confirmation notification",
        "• 'My Orders' section in the iPerkz app",
        "• Order confirmation email",
        "",
        "Please share your Order ID (e.g., 64531) and I'll check the status for you! 📦",
    )
