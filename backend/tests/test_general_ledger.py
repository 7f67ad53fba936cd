"""
Tests for general ledger posting: balance rules, sign convention, reversal.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from crud import general_ledger as crud_ledger
from crud import journal_entry as crud_journal
from schemas.general_ledger import LedgerLine
from schemas.journal_entry import JournalEntryCreate
from tests.conftest import TENANT_ID, ADMIN_EMAIL, account


class TestSignConvention:
    """Debit-normal vs credit-normal accounts."""

    def test_asset_grows_with_debit(self):
        assert crud_ledger.signed_movement("Asset", 100, 0) == Decimal("100.00")

    def test_expense_grows_with_debit(self):
        assert crud_ledger.signed_movement("Expense", 40, 10) == Decimal("30.00")

    @pytest.mark.parametrize("account_type", ["Liability", "Equity", "Income"])
    def test_credit_normal_types_grow_with_credit(self, account_type):
        assert crud_ledger.signed_movement(account_type, 0, 250) == Decimal("250.00")
        assert crud_ledger.signed_movement(account_type, 250, 0) == Decimal("-250.00")


class TestValidateLines:

    def test_single_line_is_rejected(self):
        with pytest.raises(ValueError, match="at least two lines"):
            crud_ledger.validate_lines([LedgerLine(account_id=1, debit_amount=10)])

    def test_line_with_both_sides_is_rejected(self):
        lines = [
            LedgerLine(account_id=1, debit_amount=10, credit_amount=10),
            LedgerLine(account_id=2, credit_amount=10),
        ]
        with pytest.raises(ValueError, match="either a debit or a credit"):
            crud_ledger.validate_lines(lines)

    def test_unbalanced_lines_are_rejected(self):
        lines = [LedgerLine(account_id=1, debit_amount=10), LedgerLine(account_id=2, credit_amount=9)]
        with pytest.raises(ValueError, match="must equal credits"):
            crud_ledger.validate_lines(lines)

    def test_balanced_lines_return_total(self):
        lines = [
            LedgerLine(account_id=1, debit_amount="60.50"),
            LedgerLine(account_id=2, debit_amount="39.50"),
            LedgerLine(account_id=3, credit_amount=100),
        ]
        assert crud_ledger.validate_lines(lines) == Decimal("100.00")


class TestPostTransaction:

    def test_posting_moves_balances_and_snapshots(self, db, accounting):
        cash = account(db, "1000")
        income = account(db, "4300")
        today = accounting["today"]

        entries = crud_ledger.post_transaction(db, TENANT_ID, today, [
            LedgerLine(account_id=cash.id, debit_amount=500),
            LedgerLine(account_id=income.id, credit_amount=500),
        ], "Journal Entry", 1, "Hundi collection", ADMIN_EMAIL)
        db.commit()

        assert len(entries) == 2
        assert account(db, "1000").current_balance == Decimal("500.00")
        assert account(db, "4300").current_balance == Decimal("500.00")
        assert {e.balance for e in entries} == {Decimal("500.00")}
        assert all(e.financial_period_id == accounting["period"].id for e in entries)

    def test_no_open_period_rejects_posting(self, db, accounting):
        cash = account(db, "1000")
        income = account(db, "4300")
        outside = accounting["period"].end_date + timedelta(days=1)
        with pytest.raises(ValueError, match="No open financial period"):
            crud_ledger.post_transaction(db, TENANT_ID, outside, [
                LedgerLine(account_id=cash.id, debit_amount=10),
                LedgerLine(account_id=income.id, credit_amount=10),
            ], "Journal Entry", 1)

    def test_account_of_another_tenant_is_rejected(self, db, accounting):
        cash = account(db, "1000")
        with pytest.raises(ValueError, match="not found"):
            crud_ledger.post_transaction(db, TENANT_ID, accounting["today"], [
                LedgerLine(account_id=cash.id, debit_amount=10),
                LedgerLine(account_id=99999, credit_amount=10),
            ], "Journal Entry", 1)

    def test_reverse_transaction_nets_to_zero(self, db, accounting):
        cash = account(db, "1000")
        income = account(db, "4000")
        today = accounting["today"]
        crud_ledger.post_transaction(db, TENANT_ID, today, [
            LedgerLine(account_id=cash.id, debit_amount=1001),
            LedgerLine(account_id=income.id, credit_amount=1001),
        ], "Donation", 7)
        crud_ledger.reverse_transaction(db, TENANT_ID, "Donation", 7, "Donation Refund", 7, today)
        db.commit()

        assert account(db, "1000").current_balance == Decimal("0.00")
        assert account(db, "4000").current_balance == Decimal("0.00")
        assert len(crud_ledger.get_entries_for_reference(db, TENANT_ID, "Donation", 7)) == 2
        assert len(crud_ledger.get_entries_for_reference(db, TENANT_ID, "Donation Refund", 7)) == 2

    def test_reverse_without_original_fails(self, db, accounting):
        with pytest.raises(ValueError, match="No ledger entries"):
            crud_ledger.reverse_transaction(db, TENANT_ID, "Bill", 404, "Journal Entry", 1, accounting["today"])


class TestJournalEntries:

    def _entry(self, db, on_date, amount="250.00"):
        return JournalEntryCreate(
            entry_date=on_date,
            description="Transfer to bank",
            lines=[
                {"account_id": account(db, "1100").id, "debit_amount": amount},
                {"account_id": account(db, "1000").id, "credit_amount": amount},
            ],
        )

    def test_unbalanced_entry_fails_validation(self, db, accounting):
        with pytest.raises(ValueError):
            JournalEntryCreate(
                entry_date=accounting["today"],
                lines=[
                    {"account_id": 1, "debit_amount": "10.00"},
                    {"account_id": 2, "credit_amount": "9.00"},
                ],
            )

    def test_create_posts_and_numbers(self, db, accounting):
        today = accounting["today"]
        entry = crud_journal.create_journal_entry(db, self._entry(db, today), TENANT_ID, ADMIN_EMAIL)

        assert entry.entry_number == f"JRNL-{today.year}-0001"
        assert entry.status == "Posted"
        assert [line.line_number for line in entry.lines] == [1, 2]
        assert account(db, "1100").current_balance == Decimal("250.00")
        assert account(db, "1000").current_balance == Decimal("-250.00")

    def test_failed_posting_saves_nothing(self, db, accounting):
        outside = accounting["period"].end_date + timedelta(days=1)
        with pytest.raises(ValueError):
            crud_journal.create_journal_entry(db, self._entry(db, outside), TENANT_ID, ADMIN_EMAIL)
        assert crud_journal.get_journal_entries(db, TENANT_ID) == []

    def test_reverse_marks_original(self, db, accounting):
        today = accounting["today"]
        entry = crud_journal.create_journal_entry(db, self._entry(db, today), TENANT_ID, ADMIN_EMAIL)
        reversal = crud_journal.reverse_journal_entry(db, entry.id, TENANT_ID, ADMIN_EMAIL, today, "Posted twice")

        assert reversal.reversal_of_id == entry.id
        assert crud_journal.get_journal_entry(db, entry.id, TENANT_ID).status == "Reversed"
        assert account(db, "1100").current_balance == Decimal("0.00")
        with pytest.raises(ValueError, match="Only posted"):
            crud_journal.reverse_journal_entry(db, entry.id, TENANT_ID, ADMIN_EMAIL, today)


class TestLedgerView:

    def test_opening_and_closing_balance(self, db, accounting):
        today = accounting["today"]
        start = accounting["period"].start_date
        cash = account(db, "1000")
        income = account(db, "4300")
        crud_ledger.post_transaction(db, TENANT_ID, start, [
            LedgerLine(account_id=cash.id, debit_amount=100),
            LedgerLine(account_id=income.id, credit_amount=100),
        ], "Journal Entry", 1)
        if today > start:
            crud_ledger.post_transaction(db, TENANT_ID, today, [
                LedgerLine(account_id=cash.id, debit_amount=50),
                LedgerLine(account_id=income.id, credit_amount=50),
            ], "Journal Entry", 2)
        db.commit()

        view = crud_ledger.get_ledger_view(db, TENANT_ID, cash.id, start_date=today, end_date=today)
        if today > start:
            assert view.opening_balance == Decimal("100.00")
            assert view.closing_balance == Decimal("150.00")
            assert view.total_debits == Decimal("50.00")
        else:
            assert view.opening_balance == Decimal("0.00")
            assert view.closing_balance == Decimal("100.00")

    def test_unknown_account_returns_none(self, db, accounting):
        assert crud_ledger.get_ledger_view(db, TENANT_ID, 424242) is None
