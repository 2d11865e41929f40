"""CSV export routes."""

from finflow.models.entities import User
from finflow.services import csv_processor, database
from finflow.utils.dates import is_month_key
from finflow.utils.http import error_response, not_found, csv_response


def handle_export_all(user: User) -> dict:
    """Download every transaction as CSV, newest first."""
    transactions = list(reversed(database.get_transactions(user.id)))
    return csv_response(csv_processor.generate_csv(transactions), csv_processor.export_filename(''))


def handle_export_monthly(user: User, query: dict) -> dict:
    """Download one month of transactions as CSV.

    Args:
        user: Authenticated user
        query: Query parameters (month required, YYYY-MM)

    Returns:
        Response with CSV content
    """
    month = query.get('month')
    if not month or not is_month_key(month):
        return error_response(422, 'VALIDATION_ERROR', 'The month must be in YYYY-MM format.')

    transactions = list(reversed(database.get_transactions(user.id, month=month)))
    return csv_response(csv_processor.generate_csv(transactions), csv_processor.export_filename(month))


def handle_export_category(user: User, category_id: int) -> dict:
    """Download one category's transactions as CSV."""
    category = database.get_category(user.id, category_id)
    if category is None:
        return not_found('Category')

    transactions = list(reversed(database.get_transactions(user.id, category_id=category.id)))
    filename = csv_processor.export_filename(category.name, fallback=f'category_{category.id}')
    return csv_response(csv_processor.generate_csv(transactions), filename)
