"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Client-supplied values fail the calculation preconditions"""

    pass


class CalculationNotFoundError(DomainException):
    """Referenced calculation does not exist"""

    def __init__(self, calculation_id: int):
        super().__init__(f"Calculation {calculation_id} not found")
        self.calculation_id = calculation_id


class StorageUnavailableError(DomainException):
    """Calculation store could not complete the operation"""

    pass


class TipAPIError(DomainException):
    """Tip calculator API returned an error or is unreachable"""

    pass
