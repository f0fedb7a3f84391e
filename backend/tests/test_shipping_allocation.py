from decimal import Decimal

from storefront_pricing.models.calculation import LineItem, TaxComponent
from storefront_pricing.services import shipping
from storefront_pricing.services.calculation_settings import CalculationSettings


BREAKUP = (
    TaxComponent("CGST", Decimal("9")),
    TaxComponent("SGST", Decimal("9")),
    TaxComponent("Cess", Decimal("10"), compound=True),
)
ITEM_WISE = CalculationSettings(item_wise_shipping_tax=True)


def test_package_forwarding_rate(settings: CalculationSettings) -> None:
    assert shipping.package_forwarding_rate(Decimal("1000"), Decimal("2.5"), settings=settings) == Decimal("25.00")
    assert shipping.package_forwarding_rate(Decimal("1000"), Decimal("0"), settings=settings) == Decimal("0.00")


def test_allocate_package_forwarding_stamps_every_line() -> None:
    lines = shipping.allocate_package_forwarding([LineItem(product_id="a"), LineItem(product_id="b")], Decimal("3"))
    assert [line.pf_item_value for line in lines] == [Decimal("3"), Decimal("3")]
    assert shipping.allocate_package_forwarding([LineItem(product_id="a")], None)[0].pf_item_value == Decimal("0")


def test_item_taxable_amount_includes_per_unit_freight(settings: CalculationSettings) -> None:
    line = LineItem(
        product_id="p1",
        quantity=Decimal("2"),
        unit_price=Decimal("100"),
        pf_rate=Decimal("10"),
        shipping_charges=Decimal("7"),
    )
    terms = shipping.ShippingTerms(before_tax=True)
    assert shipping.item_taxable_amount(line, terms=terms, settings=settings) == Decimal("105")
    assert shipping.item_taxable_amount(line, terms=terms, settings=ITEM_WISE) == Decimal("112")


def test_line_shipping_tax_compounds_per_line() -> None:
    line = LineItem(product_id="p1", quantity=Decimal("2"), shipping_charges=Decimal("10"))
    terms = shipping.ShippingTerms(before_tax=True)
    values = shipping.line_shipping_tax(line, BREAKUP, terms=terms, settings=ITEM_WISE)
    assert values == {"CGST": Decimal("1.80"), "SGST": Decimal("1.80"), "Cess": Decimal("0.36")}

    other = shipping.line_shipping_tax(
        LineItem(product_id="p2", quantity=Decimal("1"), shipping_charges=Decimal("10")),
        BREAKUP,
        terms=terms,
        settings=ITEM_WISE,
    )
    assert other["Cess"] == Decimal("0.18")


def test_line_shipping_tax_outside_item_wise_mode(settings: CalculationSettings) -> None:
    line = LineItem(product_id="p1", quantity=Decimal("2"), shipping_charges=Decimal("10"))
    assert shipping.line_shipping_tax(line, BREAKUP, terms=shipping.ShippingTerms(before_tax=True), settings=settings) == {}
    after_tax = shipping.line_shipping_tax(line, BREAKUP, terms=shipping.ShippingTerms(), settings=ITEM_WISE)
    assert set(after_tax.values()) == {Decimal("0")}


def test_cart_shipping_tax(settings: CalculationSettings) -> None:
    terms = shipping.ShippingTerms(
        overall_shipping=Decimal("100"), before_tax=True, before_tax_percentage=Decimal("18")
    )
    assert shipping.cart_shipping_tax(terms, settings=settings) == Decimal("18.00")
    assert shipping.cart_shipping_tax(terms, settings=ITEM_WISE) == Decimal("0")
    assert shipping.cart_shipping_tax(shipping.ShippingTerms(overall_shipping=Decimal("100")), settings=settings) == 0


def test_total_line_shipping() -> None:
    lines = [
        LineItem(product_id="a", quantity=Decimal("2"), shipping_charges=Decimal("5")),
        LineItem(product_id="b", quantity=Decimal("1"), shipping_charges=Decimal("7.50")),
    ]
    assert shipping.total_line_shipping(lines) == Decimal("17.50")


def test_total_line_shipping_uses_asked_quantity() -> None:
    line = LineItem(product_id="a", quantity=Decimal("1"), asked_quantity=Decimal("5"), shipping_charges=Decimal("10"))
    assert shipping.total_line_shipping([line]) == Decimal("50")
