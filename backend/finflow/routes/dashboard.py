"""Dashboard, insight and forecast routes."""

from finflow.models.entities import User
from finflow.services import database, forecast, insights, reports
from finflow.utils.dates import is_month_key, parse_as_of
from finflow.utils.http import error_response, success_response


def handle_get_dashboard(user: User, query: dict) -> dict:
    """Get dashboard data as of a specific date.

    Args:
        user: Authenticated user
        query: Query parameters (as_of_date optional, YYYY-MM-DD)

    Returns:
        Response with lifetime balance and the current month's figures
    """
    today = parse_as_of(query.get('as_of_date'))
    summary = reports.dashboard_summary(database.get_transactions(user.id), today)
    summary['as_of_date'] = today.isoformat()
    summary['currency'] = user.currency
    return success_response(summary)


def handle_insights(user: User, query: dict) -> dict:
    """Spending insights for a month plus the weekly reflection.

    Query:
        month: YYYY-MM (default: month of as_of_date)
        as_of_date: Reference date (default today)
    """
    month = query.get('month')
    if month and not is_month_key(month):
        return error_response(422, 'VALIDATION_ERROR', 'The month must be in YYYY-MM format.')

    today = parse_as_of(query.get('as_of_date'))
    result = insights.get_insights(database.get_transactions(user.id), today, month, user.currency)
    return success_response(result)


def handle_forecast(user: User, query: dict) -> dict:
    """End-of-month balance forecast and 7-day projection."""
    today = parse_as_of(query.get('as_of_date'))
    result = forecast.get_forecast(database.get_transactions(user.id), today)
    return success_response(result)
