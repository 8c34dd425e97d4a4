import fitz
import pytest

from order_extractor.models import Order


RESIDENTIAL_PAGE = [
    "PO # 45871236 Customer Order #: W123456789 Customer Name: Jane Smith",
    "Ship To: John Doe 123 Main St Springfield, IL 62704 (217) 555-0100",
    "Page: 3",
    "Vendor: Havelock Wool",
    "Order Date",
    "10/14/2025",
    "Model Number HW-R30-16",
    "Internet Number 318273645",
    "Havelock Wool R-22 Insulation Batts 16 in. x 48 in.",
    "Ship Via",
    "Misc. Common Carrier",
    "Address Type",
    "Residential",
    "Qty Shipped",
    "2",
]

COMMERCIAL_PAGE = [
    "PO # 99001122 Customer Order #: C55-7781 Customer Name: Roe Builders",
    "Ship To: Jane Roe 55 Oak Ave Home Depot 900 Industrial Pkwy Atlanta, GA 30301 404-555-0199",
    "Page: 1",
    "Order Date",
    "3/2/25",
    "Notes",
    "Model Number HW-R13-24",
    "Commercial",
    "Qty Shipped",
    "12",
]


@pytest.fixture()
def residential_lines():
    return list(RESIDENTIAL_PAGE)


@pytest.fixture()
def commercial_lines():
    return list(COMMERCIAL_PAGE)


@pytest.fixture()
def sample_orders():
    first = Order(
        page=1,
        cust_num="W123456789",
        po_number="45871236",
        date="10/14/2025",
        customer_name="Jane Smith",
        ship_to_name="John Doe",
        customer_address="123 Main St, Springfield, IL 62704",
        ship_to_address="123 Main St, Springfield, IL 62704",
        phone="(217) 555-0100",
        model_number="HW-R30-16",
        internet_number="318273645",
        quantity="2",
    )
    second = Order(page=2, po_number="PO-2", ship_to_name="Ann Lee")
    return [first, second]


@pytest.fixture()
def make_pdf(tmp_path):
    """Build a PDF from pages of (x, y, text) placements; y is top-down."""

    def _make(pages, name="invoice.pdf"):
        path = tmp_path / name
        doc = fitz.open()
        for placements in pages:
            page = doc.new_page(width=612, height=792)
            for x, y, text in placements:
                page.insert_text((x, y), text, fontsize=10)
        doc.save(str(path))
        doc.close()
        return str(path)

    return _make
