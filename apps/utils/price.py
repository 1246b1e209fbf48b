# apps/utils/price.py
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")


class Price:
    """
    Money value with the currency it was priced in.
    Amounts are kept to 2 decimal places; a missing amount is 0.
    """

    def __init__(self, amount=None, currency="", symbol=""):
        self.amount = self.quantize(amount)
        self.currency = currency or ""
        self.symbol = symbol or ""

    @staticmethod
    def quantize(amount):
        if amount is None or amount == "":
            amount = 0
        return Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    def with_amount(self, amount):
        return Price(amount, self.currency, self.symbol)

    def nice(self):
        if self.amount < 0:
            return f"- {self.symbol}{abs(self.amount):.2f}"
        return f"{self.symbol}{self.amount:.2f}"

    def formatted(self, precision=2):
        """Plain amount string for payment gateways."""
        return f"{self.amount:.{int(precision)}f}"

    def __add__(self, other):
        other_amount = other.amount if isinstance(other, Price) else Price.quantize(other)
        return self.with_amount(self.amount + other_amount)

    def __sub__(self, other):
        other_amount = other.amount if isinstance(other, Price) else Price.quantize(other)
        return self.with_amount(self.amount - other_amount)

    def __mul__(self, qty):
        return self.with_amount(self.amount * Decimal(str(qty)))

    def __eq__(self, other):
        if isinstance(other, Price):
            return self.amount == other.amount and self.currency == other.currency
        return NotImplemented

    def __hash__(self):
        return hash((self.amount, self.currency))

    def __str__(self):
        return self.nice()

    def __repr__(self):
        return f"<Price {self.currency} {self.amount}>"
