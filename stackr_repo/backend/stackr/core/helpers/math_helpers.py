from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")


class FinancialMathHelper:
    """Helper functions for savings calculations"""

    @staticmethod
    def to_money(amount) -> Decimal:
        """
        Convert a numeric amount to Decimal cents
        Examples: 31.1 -> Decimal('31.10'), 5 -> Decimal('5.00')
        """
        if isinstance(amount, float):
            # str() keeps the short repr, Decimal(float) would keep binary noise
            amount = str(amount)
        return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)

    @staticmethod
    def calculate_progress(current_amount: Decimal, target_amount: Decimal) -> int:
        """
        Percentage of target reached, halves rounded up, capped at 100
        Example: 30 of 100 -> 30, 150 of 100 -> 100
        """
        if target_amount <= 0:
            return 0

        percent = (Decimal(current_amount) * 100 / Decimal(target_amount)).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
        return min(100, int(percent))
