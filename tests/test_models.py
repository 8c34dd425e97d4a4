import pytest

from order_extractor.models import Order, OrderCollection, format_address


def test_order_defaults():
    order = Order(page=3)
    assert order.cust_num == "ORDER-3"
    assert order.quantity == "1"
    assert order.address_type == "Residential"
    assert order.ship_via == "Misc. Common Carrier"
    assert order.to_record()["shipToAddress"] == ""


def test_set_field_by_schema_name():
    order = Order(page=1)
    order.set_field("shipToName", "John Doe")
    order.set_field("address", "1 Elm St, Reno, NV 89501", schema="single")
    order.set_field("page", "9")

    assert order.ship_to_name == "John Doe"
    assert order.customer_address == "1 Elm St, Reno, NV 89501"
    assert order.page == 9
    assert order.to_record("single")["customerAddress"] == "John Doe"


def test_set_field_rejects_unknown_names():
    order = Order(page=1)
    with pytest.raises(KeyError):
        order.set_field("address", "x")
    with pytest.raises(ValueError):
        order.set_field("page", "seven")
    with pytest.raises(ValueError):
        order.to_record("flat")


def test_collection_replace_and_update(sample_orders):
    collection = OrderCollection([Order(page=9)])
    collection.replace(OrderCollection(sample_orders))

    assert len(collection) == 2
    assert [o.page for o in collection] == [1, 2]

    collection.update(1, "quantity", 4)
    assert collection[1].quantity == "4"
    assert collection.to_records()[1]["quantity"] == "4"

    collection.clear()
    assert not collection


def test_copy_is_independent(sample_orders):
    order = sample_orders[0]
    order.notes.append("check")
    clone = order.copy()
    clone.notes.append("other")
    clone.phone = ""
    assert order.notes == ["check"]
    assert order.phone == "(217) 555-0100"


def test_format_address():
    assert format_address("123 Main St", "Springfield", "IL", "62704") == "123 Main St, Springfield, IL 62704"
    assert format_address("", "Atlanta", "GA", "30301") == "Atlanta, GA 30301"
    assert format_address() == ""
