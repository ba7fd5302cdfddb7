class FormattingHelper:
    """Helper functions for data formatting"""

    @staticmethod
    def format_currency(amount: float, include_symbol: bool = True) -> str:
        """Format amount as US dollars"""
        if include_symbol:
            return f"${amount:,.2f}"
        return f"{amount:,.2f}"

    @staticmethod
    def format_percentage(value: float, decimal_places: int = 0) -> str:
        """Format as percentage"""
        return f"{value:.{decimal_places}f}%"
