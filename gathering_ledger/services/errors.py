"""
Ledger Error Taxonomy

Every failure a caller can see from the repository, codec or report
generator derives from LedgerError and carries a human-readable message.
Validation runs before any mutation, so a raised error means the store
was left unchanged.
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class NotFoundError(LedgerError):
    """Gathering or member lookup miss."""
    pass


class DuplicateError(LedgerError):
    """Uniqueness violation on create."""
    pass


class DuplicateIdError(DuplicateError):
    """A gathering with this id already exists."""
    pass


class DuplicateNameError(DuplicateError):
    """A global member with this name (case-insensitive) already exists."""
    pass


class AlreadyMemberError(LedgerError):
    """The member already belongs to the gathering."""
    pass


class GatheringClosedError(LedgerError):
    """Mutation attempted on a closed gathering."""
    pass


class InvalidAmountError(LedgerError):
    """Amount is not acceptable (non-positive expense, non-finite value)."""
    pass


class InvalidNameError(LedgerError):
    """Blank member name or gathering id."""
    pass


class InvalidFormatError(LedgerError):
    """Import token could not be decoded, parsed or validated."""
    pass


class ReportError(LedgerError):
    """Base exception for report generation."""
    pass


class InvalidDateRangeError(ReportError):
    """Report start date is after its end date."""
    pass


class NoDataInRangeError(ReportError):
    """No gathering was created within the report's date range."""
    pass
