"""Tests for CLI commands."""

import json
from decimal import Decimal

import pytest

from coopbook.cli.error_handling import format_amount
from coopbook.cli.main import cli
from coopbook.domain.entities import ClassificationLogEntry, ManualOverrideLogEntry


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


@pytest.mark.parametrize(
    "amount, expected",
    [("1500000", "Rp 1.500.000"), ("1500000.50", "Rp 1.500.000,50"), (None, "-")],
)
def test_format_amount(amount, expected):
    assert format_amount(Decimal(amount) if amount is not None else None) == expected


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Coopbook" in result.output


class TestPatternCommands:
    """Tests for the pattern command group."""

    def test_create(self, cli_runner, temp_db, operational_category):
        result = run(
            cli_runner,
            temp_db,
            "pattern",
            "create",
            "ATK Pattern",
            "--keywords",
            "atk|alat tulis",
            "--category",
            "Operational",
            "--min",
            "50000",
            "--max",
            "Rp 2.000.000",
            "--frequency",
            "weekly",
            "--confidence",
            "75",
        )

        assert result.exit_code == 0
        assert "Created pattern 'ATK Pattern'" in result.output
        pattern = temp_db.get_pattern_by_name("ATK Pattern")
        assert pattern.category_id == operational_category.id
        assert pattern.amount_range_max == 2000000
        assert pattern.confidence_score == 75

    def test_create_inverted_range(self, cli_runner, temp_db, operational_category):
        result = run(
            cli_runner, temp_db, "pattern", "create", "Bad", "--keywords", "atk",
            "--category", "Operational", "--min", "500", "--max", "100",
        )

        assert result.exit_code == 1
        assert "Invalid amount range" in result.output
        assert temp_db.get_pattern_by_name("Bad") is None

    def test_create_unknown_category(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "pattern", "create", "Bad", "--keywords", "atk", "--category", "Nope")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_list_hides_disabled_patterns(self, cli_runner, temp_db, payroll_pattern):
        assert "Payroll Pattern" in run(cli_runner, temp_db, "pattern", "list").output

        run(cli_runner, temp_db, "pattern", "disable", "Payroll Pattern")

        assert "No patterns found." in run(cli_runner, temp_db, "pattern", "list").output
        listing = run(cli_runner, temp_db, "pattern", "list", "--all").output
        assert "(disabled)" in listing

    def test_update(self, cli_runner, temp_db, payroll_pattern):
        result = run(cli_runner, temp_db, "pattern", "update", "Payroll Pattern", "--confidence", "70")

        assert result.exit_code == 0
        assert f"Updated pattern {payroll_pattern.id}" in result.output
        assert temp_db.get_pattern(payroll_pattern.id).confidence_score == 70

    def test_update_rejects_bad_confidence(self, cli_runner, temp_db, payroll_pattern):
        result = run(cli_runner, temp_db, "pattern", "update", str(payroll_pattern.id), "--confidence", "120")

        assert result.exit_code == 1
        assert "between 0 and 100" in result.output

    def test_enable_and_delete(self, cli_runner, temp_db, payroll_pattern):
        run(cli_runner, temp_db, "pattern", "disable", "Payroll Pattern")

        result = run(cli_runner, temp_db, "pattern", "enable", "Payroll Pattern")
        assert f"Enabled pattern {payroll_pattern.id}" in result.output
        assert temp_db.get_pattern(payroll_pattern.id).is_active

        result = run(cli_runner, temp_db, "pattern", "delete", "Payroll Pattern")
        assert f"Deleted pattern {payroll_pattern.id}" in result.output
        assert temp_db.get_pattern(payroll_pattern.id) is None


class TestPaymentMethodCommands:
    """Tests for the payment-method command group."""

    def test_create_and_list(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "payment-method", "create", "BCA", "--type", "bank_transfer")

        assert result.exit_code == 0
        assert "Created payment method 'BCA'" in result.output
        listing = run(cli_runner, temp_db, "payment-method", "list").output
        assert "BCA" in listing
        assert "bank_transfer" in listing

    def test_duplicate(self, cli_runner, temp_db, sample_payment_methods):
        result = run(cli_runner, temp_db, "payment-method", "create", "Tunai", "--type", "cash")

        assert result.exit_code == 1
        assert "already exists" in result.output


class TestClassifyCommand:
    """Tests for the classify command."""

    def test_suggestion(self, cli_runner, temp_db, payroll_pattern):
        result = run(
            cli_runner, temp_db, "classify", "--amount", "Rp 5.500.000", "--description", "Gaji karyawan"
        )

        assert result.exit_code == 0
        assert "Suggested category: Payroll" in result.output
        assert "Confidence: 90.00" in result.output
        assert "Pattern: Payroll Pattern" in result.output

    def test_no_suggestion(self, cli_runner, temp_db, payroll_pattern):
        result = run(cli_runner, temp_db, "classify", "--amount", "500", "--description", "Gaji karyawan")

        assert result.exit_code == 0
        assert "No suggestion (no pattern matched)" in result.output

    def test_classify_writes_nothing(self, cli_runner, temp_db, payroll_pattern):
        run(cli_runner, temp_db, "classify", "--amount", "5500000", "--description", "gaji")

        assert temp_db.list_classification_logs() == []
        assert temp_db.list_transactions() == []

    def test_bad_amount(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "classify", "--amount", "abc", "--description", "gaji")

        assert result.exit_code == 1
        assert "Invalid amount format" in result.output


class TestValidateCommand:
    """Tests for the validate command."""

    def test_over_limit_is_invalid(self, cli_runner, temp_db, payroll_category):
        result = run(
            cli_runner, temp_db, "validate", "--amount", "15000000", "--description", "gaji",
            "--category", "Payroll",
        )

        assert result.exit_code == 1
        assert "Invalid" in result.output
        assert "per-transaction limit" in result.output

    def test_valid_with_approval(self, cli_runner, temp_db, payroll_category):
        result = run(
            cli_runner, temp_db, "validate", "--amount", "2000000", "--description", "gaji",
            "--category", "Payroll",
        )

        assert result.exit_code == 0
        assert result.output.startswith("Valid")
        assert "Requires approval: category requires approval by policy" in result.output

    def test_unparseable_amount_is_reported(self, cli_runner, temp_db, payroll_category):
        result = run(
            cli_runner, temp_db, "validate", "--amount", "abc", "--description", "gaji",
            "--category", "Payroll",
        )

        assert result.exit_code == 1
        assert "amount must be a number" in result.output

    def test_flagged_word_warns(self, cli_runner, temp_db, operational_category):
        result = run(
            cli_runner, temp_db, "validate", "--amount", "100000", "--description", "transfer test",
            "--category", "Operational",
        )

        assert result.exit_code == 0
        assert "Warning: description contains flagged word" in result.output

    def test_bank_withdrawal_advisories(self, cli_runner, temp_db, sample_payment_methods, operational_category):
        result = run(
            cli_runner, temp_db, "validate", "--amount", "100000", "--description", "ATK",
            "--category", "Operational", "--payment-method", "Transfer Bank", "--date", "2025-02-01",
        )

        assert result.exit_code == 0
        assert "Warning: bank withdrawals need a description of at least 10 characters" in result.output
        assert "Warning: 2025-02-01 is a weekend" in result.output


class TestAddCommand:
    """Tests for the add command."""

    def test_cash_with_category(self, cli_runner, temp_db, sample_payment_methods, operational_category):
        result = run(
            cli_runner, temp_db, "add", "--amount", "750000", "--description", "Beli ATK",
            "--payment-method", "Tunai", "--category", "Operational", "--date", "2025-01-28",
        )

        assert result.exit_code == 0
        assert "Created transaction" in result.output
        assert "Suggested category" not in result.output
        [txn] = temp_db.list_transactions()
        assert txn.description == "Beli ATK"
        assert temp_db.list_classification_logs() == []
        assert temp_db.list_manual_override_logs() == []

    def test_confident_suggestion_is_used(
        self, cli_runner, temp_db, sample_payment_methods, payroll_pattern, payroll_category
    ):
        result = run(
            cli_runner, temp_db, "add", "--amount", "5500000", "--description", "Gaji karyawan Januari",
            "--payment-method", "Transfer Bank",
        )

        assert result.exit_code == 0
        assert "Using suggested category." in result.output
        [txn] = temp_db.list_transactions()
        assert txn.category_id == payroll_category.id
        [entry] = temp_db.list_classification_logs()
        assert isinstance(entry, ClassificationLogEntry)
        assert entry.transaction_id == txn.id

    def test_overriding_suggestion_logs_reason(
        self, cli_runner, temp_db, sample_payment_methods, payroll_pattern, operational_category
    ):
        result = run(
            cli_runner, temp_db, "add", "--amount", "3000000", "--description", "gaji lembur",
            "--payment-method", "Transfer Bank", "--category", "Operational", "--reason", "Overtime",
        )

        assert result.exit_code == 0
        [entry] = temp_db.list_manual_override_logs()
        assert isinstance(entry, ManualOverrideLogEntry)
        assert entry.reason == "Overtime"
        assert entry.new_category_id == operational_category.id
        assert temp_db.list_classification_logs() == []

    def test_no_confident_suggestion_needs_category(
        self, cli_runner, temp_db, sample_payment_methods, payroll_pattern
    ):
        result = run(
            cli_runner, temp_db, "add", "--amount", "5500000", "--description", "Beli printer",
            "--payment-method", "Transfer Bank",
        )

        assert result.exit_code == 1
        assert "No confident category suggestion" in result.output
        assert temp_db.list_transactions() == []

    def test_limit_blocks_unless_forced(self, cli_runner, temp_db, sample_payment_methods, payroll_category):
        args = [
            "add", "--amount", "15000000", "--description", "Gaji direksi",
            "--payment-method", "Tunai", "--category", "Payroll",
        ]

        blocked = run(cli_runner, temp_db, *args)
        assert blocked.exit_code == 1
        assert "per-transaction limit" in blocked.output
        assert temp_db.list_transactions() == []

        forced = run(cli_runner, temp_db, *args, "--force")
        assert forced.exit_code == 0
        assert "Created transaction" in forced.output
        assert "Error: transaction exceeds per-transaction limit" in forced.output
        assert len(temp_db.list_transactions()) == 1

    def test_unknown_payment_method(self, cli_runner, temp_db, operational_category):
        result = run(
            cli_runner, temp_db, "add", "--amount", "1000", "--description", "x",
            "--payment-method", "Kartu Kredit", "--category", "Operational",
        )

        assert result.exit_code == 1
        assert "not found" in result.output


class TestTransactionListCommand:
    """Tests for transaction list."""

    def test_filters(self, cli_runner, temp_db, sample_payment_methods, operational_category, payroll_category):
        run(
            cli_runner, temp_db, "add", "--amount", "750000", "--description", "Beli ATK",
            "--payment-method", "Tunai", "--category", "Operational", "--date", "2025-01-05",
        )
        run(
            cli_runner, temp_db, "add", "--amount", "2000000", "--description", "Gaji honorer",
            "--payment-method", "Tunai", "--category", "Payroll", "--date", "2025-01-25",
        )

        everything = run(cli_runner, temp_db, "transaction", "list").output
        payroll_only = run(cli_runner, temp_db, "transaction", "list", "--category", "Payroll").output
        late = run(cli_runner, temp_db, "transaction", "list", "--start-date", "2025-01-10").output

        assert "Beli ATK" in everything
        assert "Rp 2.000.000" in everything
        assert everything.index("Gaji honorer") < everything.index("Beli ATK")
        assert "Beli ATK" not in payroll_only
        assert "Beli ATK" not in late
        assert "Gaji honorer" in late

    def test_empty(self, cli_runner, temp_db):
        assert "No transactions found." in run(cli_runner, temp_db, "transaction", "list").output


class TestAnalyticsCommand:
    """Tests for the analytics command."""

    def test_empty_ledger(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "analytics")

        assert result.exit_code == 0
        assert "Classifications:     0" in result.output
        assert "ALERT" not in result.output

    def test_json_output(self, cli_runner, temp_db, sample_payment_methods, payroll_pattern):
        run(
            cli_runner, temp_db, "add", "--amount", "5500000", "--description", "Gaji karyawan",
            "--payment-method", "Transfer Bank",
        )

        result = run(cli_runner, temp_db, "analytics", "--range", "7d", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["totalClassifications"] == 1
        assert data["accuracyRate"] == 100
        assert len(data["dailyStats"]) == 7
