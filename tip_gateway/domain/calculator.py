"""Tip calculation - core business logic for splitting a bill"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from numbers import Number
from typing import Tuple

from tip_gateway.domain.exceptions import InvalidInputError
from tip_gateway.domain.models import TipBreakdown

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def round_cents(value: Decimal) -> Decimal:
    """Round half-up to two decimal places"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _to_decimal(value: Number, label: str) -> Decimal:
    # bool is an int subclass; True must not pass as one person
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidInputError(f"{label} must be a number")

    # Floats go through their shortest repr so 33.33 stays 33.33
    number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if not number.is_finite():
        raise InvalidInputError(f"{label} must be a finite number")
    return number


def _working_precision(bill: Decimal, tip: Decimal, people: int) -> int:
    """Digits needed to multiply, add and quantize to cents without overflowing the context"""
    digits = len(bill.as_tuple().digits) + len(tip.as_tuple().digits) + len(str(people))
    return 28 + digits + max(0, bill.adjusted()) + max(0, tip.adjusted())


def validate_inputs(
    bill_amount: Number,
    tip_percent: Number,
    number_of_people: Number,
) -> Tuple[Decimal, Decimal, int]:
    """
    Check calculation preconditions and normalize the inputs.

    Requirements:
    - bill amount strictly positive
    - tip percent zero or more
    - number of people a whole number, at least 1

    Returns:
        (bill_amount, tip_percent, number_of_people) as Decimal, Decimal, int

    Raises:
        InvalidInputError: When any value is missing, non-numeric or out of range
    """
    bill = _to_decimal(bill_amount, "Bill amount")
    tip = _to_decimal(tip_percent, "Tip percent")
    people = _to_decimal(number_of_people, "Number of people")

    if bill <= 0:
        raise InvalidInputError("Bill amount must be greater than 0")
    if tip < 0:
        raise InvalidInputError("Tip percent cannot be negative")
    if people != people.to_integral_value():
        raise InvalidInputError("Number of people must be a whole number")
    if people < 1:
        raise InvalidInputError("Number of people must be at least 1")

    return bill, tip, int(people)


def compute(bill_amount: Number, tip_percent: Number, number_of_people: Number) -> TipBreakdown:
    """
    Split a bill with tip across a party.

    Each step is rounded half-up to cents before the next one uses it:
        tip    = round(bill * tip% / 100)
        total  = round(bill + tip)
        share  = round(total / people)

    Example:
        compute(33.33, 15, 3)
        tip   = 4.9995  -> 5.00
        total = 38.33
        share = 12.7766 -> 12.78
    """
    bill, tip, people = validate_inputs(bill_amount, tip_percent, number_of_people)

    with localcontext() as ctx:
        ctx.prec = _working_precision(bill, tip, people)
        tip_amount = round_cents(bill * tip / HUNDRED)
        total_with_tip = round_cents(bill + tip_amount)
        amount_per_person = round_cents(total_with_tip / people)

    return TipBreakdown(
        tip_amount=tip_amount,
        total_with_tip=total_with_tip,
        amount_per_person=amount_per_person,
    )
