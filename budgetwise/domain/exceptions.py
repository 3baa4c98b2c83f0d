"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InputOutOfRangeError(DomainException):
    """Amount is negative or non-finite, or an education duration is not positive"""

    pass


class BudgetNotFoundError(DomainException):
    """User has no active budget to analyze against"""

    pass


class ConversationNotFoundError(DomainException):
    """Chat conversation does not exist for this user"""

    pass


class PremiumRequiredError(DomainException):
    """Feature is only available on the premium tier"""

    pass


class AdvisorUnavailableError(DomainException):
    """AI advisor API returned an error or is unavailable"""

    pass
