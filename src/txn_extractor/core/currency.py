"""
Currency conversion collaborators

The writer only needs a callable convert(amount, from_code, to_code).
Rate lookup is outside this package; StaticRateConverter covers tests,
dry runs and offline use with a fixed table.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Optional

Converter = Callable[[Decimal, str, str], Decimal]

# Units of each currency per 1 GHS
DEFAULT_RATES: Dict[str, Decimal] = {
    'GHS': Decimal('1.0'),
    'USD': Decimal('0.08'),
    'EUR': Decimal('0.073'),
    'GBP': Decimal('0.063'),
}

CENT = Decimal('0.01')


def identity_convert(amount: Decimal, from_code: str, to_code: str) -> Decimal:
    return amount


class StaticRateConverter:
    """
    Converts through a fixed rate table anchored on one currency
    """

    def __init__(self, rates: Optional[Dict[str, Decimal]] = None, anchor: str = 'GHS'):
        self.rates = {code.upper(): Decimal(str(rate)) for code, rate in (rates or DEFAULT_RATES).items()}
        self.anchor = anchor.upper()
        if self.rates.get(self.anchor) is None:
            self.rates[self.anchor] = Decimal('1')

    def rate(self, from_code: str, to_code: str) -> Decimal:
        """Rate such that amount_in_from * rate == amount_in_to"""
        from_code = from_code.upper()
        to_code = to_code.upper()
        if from_code == to_code:
            return Decimal('1')
        if from_code not in self.rates or to_code not in self.rates:
            raise KeyError(f"No rate for {from_code} -> {to_code}")
        return self.rates[to_code] / self.rates[from_code]

    def __call__(self, amount: Decimal, from_code: str, to_code: str) -> Decimal:
        return (amount * self.rate(from_code, to_code)).quantize(CENT, rounding=ROUND_HALF_UP)
