from order_extractor.extractor import extract_order
from order_extractor.models import Order
from order_extractor.validator import validate_order, validate_orders


def test_clean_residential_order_has_no_warnings(residential_lines):
    order = extract_order(residential_lines, page_index=1)
    assert validate_order(order) == []


def test_default_order_is_flagged():
    warnings = validate_order(Order(page=2))
    assert any("fallback 'ORDER-2'" in w for w in warnings)
    assert any("poNumber is empty" in w for w in warnings)
    assert any("modelNumber is empty" in w for w in warnings)
    assert all(w.startswith("[WARNING]") for w in warnings)


def test_commercial_assumption_is_flagged_for_review(commercial_lines):
    order = extract_order(commercial_lines, page_index=1)
    warnings = validate_order(order)
    review = [w for w in warnings if w.startswith("[REVIEW]")]
    assert len(review) == 1
    assert "Home Depot store address" in review[0]


def test_bad_quantity_and_phone():
    order = Order(page=1, cust_num="A1", quantity="two", phone="555-0100")
    warnings = validate_order(order)
    assert any(w.startswith("[ERROR]") and "quantity 'two'" in w for w in warnings)
    assert any("phone '555-0100'" in w for w in warnings)


def test_duplicates_across_pages():
    orders = [
        Order(page=1, cust_num="W1"),
        Order(page=1, cust_num="W1"),
        Order(page=2, cust_num="W2"),
    ]
    warnings = validate_orders(orders)
    assert any("'W1' appears on 2 pages: [1, 1]" in w for w in warnings)
    assert any("Page number 1 appears 2 times" in w for w in warnings)
    assert not any("'W2' appears" in w for w in warnings)
