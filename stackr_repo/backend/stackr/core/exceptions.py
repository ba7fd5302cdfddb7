from typing import Any, Optional


class ChallengeError(Exception):
    """Base error for the savings challenge engine"""

    def __init__(self, message: str, challenge_id: Optional[str] = None):
        self.message = message
        self.challenge_id = challenge_id
        super().__init__(message)


class NotFound(ChallengeError):
    """Referenced challenge or template id is not in the relevant collection"""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        super().__init__(f"{resource} with ID {resource_id} not found", resource_id)


class InvalidAmount(ChallengeError):
    """Savings amount is not a positive number"""

    def __init__(self, amount: Any, challenge_id: Optional[str] = None):
        self.amount = amount
        super().__init__(f"Savings amount must be a positive number, got {amount!r}", challenge_id)
