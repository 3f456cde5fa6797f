"""Weight reconciliation and invoice arithmetic.

Pure functions only — no DB, no I/O.  Every result is rounded to a whole
number with round-half-up (``floor(x + 0.5)``), matching what the clerks
see on paper.  Missing or NaN operands count as 0.

Card weights:
    discount_amount / net_weight / discount_percentage, tied together by
    DiscountTriangle: one of the three is the driver, the other two derive.

Invoice:
    contract qty   = qty_per_bag * bags + extra_kg * (qty_per_bag / bag_weight)
    free qty       = max(0, net_weight - contract qty)
    contract amt   = price * min(contract qty, net_weight)
    free amt       = free_price * free qty
    seed rights    = bag_price * bags + (bag_price / bag_weight) * extra_kg
    total          = contract amt + free amt
    net            = total - seed rights
    final          = net - additional deductions
"""

from __future__ import annotations

import enum
import math
from dataclasses import asdict, dataclass

SEED_BAG_WEIGHT_KG = 50


def _num(value) -> float:
    """Coerce an operand to float; None / NaN / junk become 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ── Card weights ─────────────────────────────────────────────


def discount_amount(weight, percentage) -> float:
    weight, percentage = _num(weight), _num(percentage)
    if not weight or not percentage:
        return 0
    return round_half_up(weight * percentage / 100)


def net_weight(gross_weight, discount) -> float:
    gross_weight, discount = _num(gross_weight), _num(discount)
    if not gross_weight:
        return 0
    if not discount:
        return gross_weight
    return round_half_up(gross_weight - discount)


def discount_percentage(gross_weight, discount) -> float:
    gross_weight, discount = _num(gross_weight), _num(discount)
    if not gross_weight or not discount:
        return 0
    return round_half_up(discount / gross_weight * 100)


class DiscountMode(str, enum.Enum):
    """Which of the three weight fields the clerk typed last."""
    BY_PERCENTAGE = "by_percentage"
    BY_AMOUNT = "by_amount"
    BY_NET_WEIGHT = "by_net_weight"


_DRIVER_FIELD = {
    DiscountMode.BY_PERCENTAGE: "discount_percentage",
    DiscountMode.BY_AMOUNT: "discount_amount",
    DiscountMode.BY_NET_WEIGHT: "net_weight",
}


@dataclass
class DiscountTriangle:
    """State machine over (discount %, discount kg, net weight).

    ``drive(mode, value)`` makes one field authoritative, clears the other
    two and re-derives them from the gross weight.  Changing the gross
    weight re-derives from the current driver.  Nothing derives while the
    gross weight is not positive.

    Derivation guards:
      BY_NET_WEIGHT   only when 0 < net <= gross
      BY_AMOUNT       only when 0 <= amount <= gross
    Outside the guard the derived fields stay cleared and
    ``out_of_range`` is True.
    """
    gross_weight: float = 0.0
    mode: DiscountMode | None = None
    discount_percentage: float | None = None
    discount_amount: float | None = None
    net_weight: float | None = None

    def set_gross_weight(self, value) -> "DiscountTriangle":
        self.gross_weight = _num(value)
        self._recompute()
        return self

    def drive(self, mode: DiscountMode | str, value) -> "DiscountTriangle":
        self.mode = DiscountMode(mode)
        self.discount_percentage = None
        self.discount_amount = None
        self.net_weight = None
        setattr(self, _DRIVER_FIELD[self.mode], _num(value))
        self._recompute()
        return self

    @property
    def driver_value(self) -> float | None:
        if self.mode is None:
            return None
        return getattr(self, _DRIVER_FIELD[self.mode])

    @property
    def out_of_range(self) -> bool:
        if self.mode is None or self.gross_weight <= 0:
            return False
        value = self.driver_value
        if self.mode is DiscountMode.BY_NET_WEIGHT:
            return not 0 < value <= self.gross_weight
        if self.mode is DiscountMode.BY_AMOUNT:
            return not 0 <= value <= self.gross_weight
        return False

    def _clear_derived(self) -> None:
        for mode, field_name in _DRIVER_FIELD.items():
            if mode is not self.mode:
                setattr(self, field_name, None)

    def _recompute(self) -> None:
        gross = self.gross_weight
        if self.mode is None or gross <= 0:
            return

        if self.out_of_range:
            self._clear_derived()
            return

        if self.mode is DiscountMode.BY_PERCENTAGE:
            amount = discount_amount(gross, self.discount_percentage)
            self.discount_amount = amount
            self.net_weight = net_weight(gross, amount)
        elif self.mode is DiscountMode.BY_NET_WEIGHT:
            amount = gross - self.net_weight
            self.discount_amount = amount
            self.discount_percentage = discount_percentage(gross, amount)
        else:
            self.discount_percentage = discount_percentage(gross, self.discount_amount)
            self.net_weight = net_weight(gross, self.discount_amount)

    def resolve(self) -> tuple[float, float, float]:
        """Final (percentage, amount, net) as stored on save.

        Blank fields fall back the way the intake form does: percentage to
        0, amount from the percentage, net weight from the amount.
        """
        gross = self.gross_weight
        percentage = self.discount_percentage or 0
        amount = self.discount_amount or discount_amount(gross, percentage)
        net = self.net_weight or net_weight(gross, amount)
        return percentage, amount, net


def resolve_card_weights(
    gross_weight,
    mode: DiscountMode | str | None = None,
    value=None,
) -> DiscountTriangle:
    """Build a triangle for ``gross_weight`` driven by ``mode`` = ``value``."""
    triangle = DiscountTriangle(gross_weight=_num(gross_weight))
    if mode is not None:
        triangle.drive(mode, value)
    return triangle


# ── Invoice ──────────────────────────────────────────────────


def seed_price_per_kg(bag_price, bag_weight=SEED_BAG_WEIGHT_KG) -> float:
    bag_price, bag_weight = _num(bag_price), _num(bag_weight)
    if not bag_price or not bag_weight:
        return 0
    return round_half_up(bag_price / bag_weight)


def total_contract_quantity(
    quantity_per_bag, bag_count, extra_kg=0, bag_weight=SEED_BAG_WEIGHT_KG,
) -> float:
    quantity_per_bag, bag_count = _num(quantity_per_bag), _num(bag_count)
    if not quantity_per_bag or not bag_count:
        return 0
    bag_weight = _num(bag_weight) or SEED_BAG_WEIGHT_KG
    per_kilo = quantity_per_bag / bag_weight
    return round_half_up(quantity_per_bag * bag_count + _num(extra_kg) * per_kilo)


def free_quantity(net_weight_kg, contract_quantity) -> float:
    net_weight_kg = _num(net_weight_kg)
    if not net_weight_kg:
        return 0
    return max(0, round_half_up(net_weight_kg - _num(contract_quantity)))


def contract_amount(price, contract_quantity, net_weight_kg) -> float:
    """Contract price applies to at most the weight actually delivered."""
    price = _num(price)
    if not price:
        return 0
    contract_quantity, net_weight_kg = _num(contract_quantity), _num(net_weight_kg)
    if contract_quantity >= net_weight_kg:
        return round_half_up(net_weight_kg * price)
    return round_half_up(contract_quantity * price)


def free_amount(free_price, free_qty) -> float:
    free_price, free_qty = _num(free_price), _num(free_qty)
    if not free_price or not free_qty:
        return 0
    return round_half_up(free_price * free_qty)


def seed_rights(bag_price, bag_count, extra_kg=0, bag_weight=SEED_BAG_WEIGHT_KG) -> float:
    bag_price = _num(bag_price)
    if not bag_price:
        return 0
    full_bags = bag_price * _num(bag_count)
    extra = seed_price_per_kg(bag_price, bag_weight) * _num(extra_kg)
    return round_half_up(full_bags + extra)


def total_amount(contract_amt, free_amt) -> float:
    return round_half_up(_num(contract_amt) + _num(free_amt))


def net_amount(total, seed_rights_amt) -> float:
    return round_half_up(_num(total) - _num(seed_rights_amt))


def final_amount(net, additional_deductions) -> float:
    return round_half_up(_num(net) - _num(additional_deductions))


@dataclass(frozen=True)
class InvoiceBreakdown:
    total_net_weight: float
    total_contract_quantity: float
    free_quantity: float
    contract_amount: float
    free_amount: float
    seed_rights: float
    total_amount: float
    net_amount: float
    final_amount: float

    def as_dict(self) -> dict:
        return asdict(self)


def calculate_invoice(
    total_net_weight,
    *,
    contract_price=0,
    free_price=0,
    contract_quantity_per_bag=0,
    seed_bags=0,
    seed_bag_price=0,
    additional_seed_kilos=0,
    additional_deductions=0,
    bag_weight=SEED_BAG_WEIGHT_KG,
) -> InvoiceBreakdown:
    """Full monetary breakdown for a set of cards weighing ``total_net_weight``."""
    total_net_weight = _num(total_net_weight)
    contract_qty = total_contract_quantity(
        contract_quantity_per_bag, seed_bags, additional_seed_kilos, bag_weight,
    )
    free_qty = free_quantity(total_net_weight, contract_qty)
    contract_amt = contract_amount(contract_price, contract_qty, total_net_weight)
    free_amt = free_amount(free_price, free_qty)
    seeds = seed_rights(seed_bag_price, seed_bags, additional_seed_kilos, bag_weight)
    total = total_amount(contract_amt, free_amt)
    net = net_amount(total, seeds)

    return InvoiceBreakdown(
        total_net_weight=total_net_weight,
        total_contract_quantity=contract_qty,
        free_quantity=free_qty,
        contract_amount=contract_amt,
        free_amount=free_amt,
        seed_rights=seeds,
        total_amount=total,
        net_amount=net,
        final_amount=final_amount(net, additional_deductions),
    )
