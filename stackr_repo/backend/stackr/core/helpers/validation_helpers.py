import math
import re
from decimal import Decimal


class ValidationHelper:
    """Helper functions for data validation"""

    @staticmethod
    def sanitize_input(text: str, max_length: int = 500) -> str:
        """Sanitize user input"""
        if not text:
            return ""

        # Remove control characters
        text = re.sub(r'[\x00-\x1F\x7F]', '', text)

        # Limit length
        text = text[:max_length]

        # Strip whitespace
        return text.strip()

    @staticmethod
    def is_valid_amount(amount) -> bool:
        """Validate savings amount: a finite int, float or Decimal above zero"""
        if isinstance(amount, bool):
            return False
        if isinstance(amount, Decimal):
            return amount.is_finite() and amount > 0
        if isinstance(amount, (int, float)):
            return math.isfinite(amount) and amount > 0
        return False
