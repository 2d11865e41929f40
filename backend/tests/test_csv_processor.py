"""Tests for CSV export."""

import csv
import io
from datetime import date


class TestGenerateCsv:
    """Tests for CSV generation."""

    def test_generate_csv(self, make_txn):
        from finflow.services.csv_processor import EXPORT_COLUMNS, generate_csv

        txn = make_txn('125000.5', date(2025, 1, 3), category_name='Food', spending_type='need')
        txn.id = 7
        txn.note = 'Lunch, with team'
        income = make_txn(5000000, date(2025, 1, 1), 'income', category_name='Salary')
        income.id = 8

        content = generate_csv([txn, income])
        rows = list(csv.reader(io.StringIO(content)))

        assert rows[0] == EXPORT_COLUMNS
        assert rows[1] == ['7', '2025-01-03', 'expense', 'Food', '125000.50', 'Lunch, with team', 'need']
        assert rows[2] == ['8', '2025-01-01', 'income', 'Salary', '5000000.00', '', '']

    def test_empty(self):
        from finflow.services.csv_processor import generate_csv

        content = generate_csv([])
        assert content.strip() == 'ID,Date,Type,Category,Amount,Note,Spending Type'


class TestFormatAmount:
    def test_format_amount_for_csv(self):
        from finflow.services.csv_processor import format_amount_for_csv
        from decimal import Decimal

        assert format_amount_for_csv(Decimal('100')) == '100.00'
        assert format_amount_for_csv(Decimal('0.5')) == '0.50'
        assert format_amount_for_csv(None) == ''


class TestExportFilename:
    def test_export_filename(self):
        from finflow.services.csv_processor import export_filename

        assert export_filename('2025-01') == 'transactions_2025-01.csv'
        assert export_filename('Food & Drinks') == 'transactions_food_drinks.csv'
        assert export_filename('') == 'all_transactions.csv'

    def test_fallback_when_scope_has_no_safe_characters(self):
        from finflow.services.csv_processor import export_filename

        assert export_filename('!!!', fallback='category_12') == 'transactions_category_12.csv'
        assert export_filename('食費', fallback='category_3') == 'transactions_category_3.csv'
        assert export_filename('Food', fallback='category_3') == 'transactions_food.csv'
