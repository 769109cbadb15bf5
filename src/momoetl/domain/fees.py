"""Fee policy for loaded transactions."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from momoetl.domain.entities import FeeQuote, FeeType

CENTS = Decimal("0.01")


class FeePolicy:
    """Decides the fee charged to the sender of a transaction.

    Precedence: a fee stated in the SMS itself (Flat), then the tiered
    schedule when one is configured (Tiered), then the percentage rate
    (Percentage).
    """

    def __init__(
        self,
        percentage: Decimal = Decimal("1.0"),
        tiers: Optional[Sequence[tuple[Decimal, Decimal]]] = None,
    ):
        """Initialize fee policy.

        Args:
            percentage: Percent of the amount charged when no tier applies
            tiers: Optional (upper_bound, flat_fee) pairs; the first tier whose
                upper bound is >= the amount applies. Amounts above every
                bound fall back to the percentage rate.

        Raises:
            ValueError: If the percentage or any tier value is negative
        """
        if percentage < 0:
            raise ValueError(f"Fee percentage must not be negative, got {percentage}")
        self.percentage = Decimal(percentage)
        self.tiers = sorted((Decimal(bound), Decimal(fee)) for bound, fee in (tiers or ()))
        for bound, fee in self.tiers:
            if bound <= 0 or fee < 0:
                raise ValueError(f"Invalid fee tier ({bound}, {fee})")

    def quote(self, amount: Decimal, explicit_fee: Optional[Decimal] = None) -> FeeQuote:
        """Compute the fee for an amount.

        Args:
            amount: Transaction amount
            explicit_fee: Fee stated by the source record, if any

        Returns:
            FeeQuote with the fee rounded half-up to cents
        """
        if explicit_fee is not None:
            return FeeQuote(amount=explicit_fee.quantize(CENTS, rounding=ROUND_HALF_UP), fee_type=FeeType.FLAT)

        for bound, fee in self.tiers:
            if amount <= bound:
                return FeeQuote(amount=fee.quantize(CENTS, rounding=ROUND_HALF_UP), fee_type=FeeType.TIERED)

        fee = (amount * self.percentage / Decimal(100)).quantize(CENTS, rounding=ROUND_HALF_UP)
        return FeeQuote(amount=fee, fee_type=FeeType.PERCENTAGE, percentage=self.percentage)
