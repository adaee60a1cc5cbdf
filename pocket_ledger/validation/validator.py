"""
Draft Validation

DESIGN DECISION: Drafts are checked before the ledger touches the store.
A rejected draft never causes a partial write.

Error-level issues block the write:
- amount missing, zero or negative
- no account selected
- no category selected

Warning-level issues are reported but do not block:
- transaction date in the future

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the draft.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pocket_ledger.models.ledger import TransactionDraft, ValidationIssue


class TransactionValidationError(Exception):
    """A draft cannot be written to the ledger."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


def validate_amount(amount: Optional[Decimal]) -> Optional[ValidationIssue]:
    """Check that an amount is a positive magnitude."""
    if amount is None:
        return ValidationIssue(
            field="amount",
            issue_type="missing",
            message="Amount is required",
            severity="error",
        )
    if not amount.is_finite() or amount <= 0:
        return ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message="Amount must be greater than zero",
            severity="error",
        )
    return None


class DraftValidator:
    """Validates transaction drafts before they reach the ledger writer."""

    def validate(
        self,
        draft: TransactionDraft,
        today: Optional[date] = None,
    ) -> list[ValidationIssue]:
        """
        Collect every issue with the draft.

        Returns: list of issues (empty when the draft is clean)
        """
        issues = []

        amount_issue = validate_amount(draft.amount)
        if amount_issue:
            issues.append(amount_issue)

        if not draft.account_id:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="Select an account",
                severity="error",
            ))

        if not draft.category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Select a category",
                severity="error",
            ))

        today = today or date.today()
        if draft.txn_date > today:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date {draft.txn_date.isoformat()} is in the future",
                severity="warning",
            ))

        return issues

    def ensure_valid(self, draft: TransactionDraft) -> list[ValidationIssue]:
        """
        Raise if the draft has error-level issues.

        Returns: the remaining warnings
        """
        issues = self.validate(draft)
        errors = [issue for issue in issues if issue.severity == "error"]
        if errors:
            raise TransactionValidationError(errors)
        return issues
