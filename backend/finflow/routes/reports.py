"""Report routes."""

from finflow.models.entities import User
from finflow.services import balance, database, pdf_generator, reports
from finflow.utils.dates import is_month_key, parse_as_of, previous_month_key
from finflow.utils.http import error_response, pdf_response, success_response
from finflow.utils.validation import Validator

MAX_HISTORY_MONTHS = 24


def _monthly_report(user: User, month: str) -> dict:
    """Build the report from the two months it compares."""
    transactions = database.get_transactions(
        user.id,
        start_date=f'{previous_month_key(month)}-01',
        end_date=f'{month}-31'
    )
    return reports.monthly_report(transactions, month)


def _month_error(month) -> dict:
    if not month:
        return error_response(422, 'VALIDATION_ERROR', 'The month field is required.')
    return error_response(422, 'VALIDATION_ERROR', 'The month must be in YYYY-MM format.')


def handle_monthly(user: User, query: dict) -> dict:
    """Monthly report compared with the previous month.

    Args:
        user: Authenticated user
        query: Query parameters (month required, YYYY-MM)

    Returns:
        Response with the report
    """
    month = query.get('month')
    if not month or not is_month_key(month):
        return _month_error(month)

    return success_response(_monthly_report(user, month))


def handle_monthly_pdf(user: User, query: dict) -> dict:
    """Monthly report rendered as a PDF download."""
    month = query.get('month')
    if not month or not is_month_key(month):
        return _month_error(month)

    pdf_bytes = pdf_generator.generate_monthly_report_pdf(
        _monthly_report(user, month), user.name, user.currency
    )
    return pdf_response(pdf_bytes, f'FinFlow_Report_{month}.pdf')


def handle_balance_history(user: User, query: dict) -> dict:
    """Cumulative balance across all accounts for the trailing months.

    Query:
        months: Number of months (default 6)
        as_of_date: Reference date (default today)
    """
    validator = Validator(query)
    months = validator.integer('months', required=False, minimum=1, maximum=MAX_HISTORY_MONTHS)
    validator.validate()

    today = parse_as_of(query.get('as_of_date'))
    history = balance.monthly_balance_history(
        database.get_transactions(user.id),
        today,
        months or balance.DEFAULT_HISTORY_MONTHS
    )
    return success_response(history)
