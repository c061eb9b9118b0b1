from __future__ import annotations

from sms_notifier.formatting import project_order, render_message


def _order(**overrides):
    order = {
        "status": "pending",
        "smsSent": False,
        "restaurantName": "Test Spot",
        "cart": [{"name": "Burger", "quantity": 2, "price": 10}],
        "totalAmount": 20.0,
        "deliveryDetails": {
            "hostel": "North",
            "location": "12",
            "contactNumber": "0551234567",
            "note": "",
        },
    }
    order.update(overrides)
    return order


def test_render_full_message():
    message = render_message(project_order("order-1", _order()))

    assert message == (
        "New Order Received!\n"
        "\n"
        "Restaurant: Test Spot\n"
        "Items:\n"
        "2x Burger - GHC20.00\n"
        "Note: None\n"
        "Total: GHC20.00\n"
        "\n"
        "Location: North, Room 12\n"
        "Customer: Unknown\n"
        "Contact: 0551234567\n"
        "\n"
        "Order ID: order-1"
    )


def test_currency_symbol_is_configurable():
    message = render_message(project_order("order-1", _order()), currency="GH₵")

    assert "2x Burger - GH₵20.00" in message
    assert "Total: GH₵20.00" in message


def test_missing_fields_render_fallbacks():
    summary = project_order("order-2", {})
    message = render_message(summary)

    assert summary.total == "0.00"
    assert "Restaurant: N/A" in message
    assert "Items:\nNo items\n" in message
    assert "Note: None" in message
    assert "Total: GHC0.00" in message
    assert "Location: N/A, Room -" in message
    assert "Customer: Unknown" in message
    assert "Contact: -" in message


def test_non_mapping_delivery_details_is_ignored():
    summary = project_order("order-3", {"deliveryDetails": "North hostel"})

    assert summary.hostel == "N/A"
    assert summary.contact == "-"


def test_cart_items_used_when_cart_missing():
    summary = project_order("order-4", {"cartItems": [{"name": "Waakye", "price": 15}]})

    assert len(summary.items) == 1
    assert summary.items[0].quantity == 1
    assert summary.items[0].line_total == 15


def test_cart_preferred_over_cart_items():
    summary = project_order(
        "order-5",
        {"cart": [{"name": "Kenkey"}], "cartItems": [{"name": "Banku"}]},
    )

    assert [line.name for line in summary.items] == ["Kenkey"]


def test_item_with_size_and_extras():
    order = _order(
        cart=[
            {
                "name": "Jollof",
                "quantity": 1,
                "price": 30,
                "size": "Large",
                "extras": [{"name": "Chicken", "quantity": 2, "price": "5"}],
            }
        ]
    )
    message = render_message(project_order("order-6", order))

    assert "1x Jollof (Large) - GHC30.00\nExtras:\n - Chicken (GHC5.00) 2x\nNote:" in message


def test_bad_item_values_fall_back():
    summary = project_order(
        "order-7",
        {"cart": [{"price": "ten", "extras": [{"price": "n/a"}]}, "not-an-item"]},
    )

    first, second = summary.items
    assert first.name == "Unnamed Item"
    assert first.unit_price == 0
    assert first.extras[0].name == "Unnamed Extra"
    assert first.extras[0].price == 0
    assert first.extras[0].quantity == 1
    assert second.name == "Unnamed Item"


def test_float_quantity_renders_as_integer():
    message = render_message(
        project_order("order-8", {"cart": [{"name": "Fries", "quantity": 3.0, "price": 2.5}]})
    )

    assert "3x Fries - GHC7.50" in message


def test_numeric_location_and_total_formatting():
    summary = project_order(
        "order-9",
        {"totalAmount": 12.5, "userName": "Ama", "deliveryDetails": {"location": 12}},
    )

    assert summary.total == "12.50"
    assert summary.location == "12"
    assert summary.customer == "Ama"


def test_money_ties_round_half_up():
    order = {"totalAmount": 12.125, "cart": [{"name": "Pie", "quantity": 1, "price": 0.125}]}

    message = render_message(project_order("order-10", order))

    assert "Total: GHC12.13" in message
    assert "1x Pie - GHC0.13" in message


def test_extra_price_tie_rounds_half_up():
    order = {"cart": [{"name": "Rice", "price": 5, "extras": [{"name": "Egg", "price": 0.125}]}]}

    message = render_message(project_order("order-11", order))

    assert " - Egg (GHC0.13) 1x" in message


def test_extra_price_reads_leading_number():
    order = {"cart": [{"name": "Rice", "price": 5, "extras": [{"name": "Egg", "price": "5 GHS"}]}]}

    summary = project_order("order-12", order)

    assert summary.items[0].extras[0].price == 5
    assert " - Egg (GHC5.00) 1x" in render_message(summary)
