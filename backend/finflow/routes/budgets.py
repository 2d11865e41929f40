"""Budget management routes."""

from datetime import date
from typing import List, Optional

from finflow.models.entities import Budget, BudgetPeriod, User
from finflow.services import budget_calc, database
from finflow.utils.dates import parse_as_of
from finflow.utils.http import not_found, success_response
from finflow.utils.validation import Validator

BUDGET_PERIODS = [p.value for p in BudgetPeriod]


def _validate_budget(user: User, body: dict, partial: bool = False,
                     existing: Optional[Budget] = None) -> dict:
    validator = Validator(body, partial=partial)
    validator.string('name', max_length=100)
    validator.amount('amount')
    validator.choice('period', BUDGET_PERIODS)
    start_date = validator.date('start_date')
    if start_date is None and existing is not None:
        start_date = existing.start_date
    validator.date('end_date', required=False, after=start_date)

    # A new start must still precede the stored end date
    if (existing is not None and 'end_date' not in validator.body and existing.end_date is not None
            and 'start_date' in validator.cleaned and start_date >= existing.end_date):
        validator.error('start_date', f'The start_date must be a date before {existing.end_date.isoformat()}.')

    validator.integer('alert_threshold', required=False, minimum=1, maximum=100)
    category_id = validator.integer('category_id', required=False)
    validator.boolean('is_active')

    if category_id and database.get_category(user.id, category_id) is None:
        validator.error('category_id', 'The selected category_id is invalid.')

    return validator.validate()


def _evaluate(user: User, budgets: List[Budget], today: date) -> List[budget_calc.BudgetProgress]:
    """Evaluate budgets against the user's expenses from the earliest period start."""
    start = budget_calc.expense_window_start(budgets, today)
    if start is None:
        return []
    expenses = database.get_transactions(user.id, type='expense', start_date=start)
    return budget_calc.evaluate_budgets(budgets, expenses, today)


def handle_list(user: User, query: dict) -> dict:
    """List active budgets with their progress and a summary.

    Args:
        user: Authenticated user
        query: Query parameters (as_of_date optional)

    Returns:
        Response with evaluated budgets and the portfolio summary
    """
    today = parse_as_of(query.get('as_of_date'))
    progress = _evaluate(user, database.get_budgets(user.id), today)

    return success_response({
        'budgets': [p.to_dict() for p in progress],
        'summary': budget_calc.get_budget_summary(progress)
    })


def handle_create(user: User, body: dict) -> dict:
    """Create a budget."""
    fields = _validate_budget(user, body)
    budget = database.create_budget(user.id, fields)
    return success_response(budget.to_dict(), status_code=201, message='Budget created successfully')


def handle_get(user: User, budget_id: int, query: dict) -> dict:
    """Show one budget with its progress for the current period."""
    budget = database.get_budget(user.id, budget_id)
    if budget is None:
        return not_found('Budget')

    today = parse_as_of(query.get('as_of_date'))
    progress = _evaluate(user, [budget], today)[0]
    return success_response(progress.to_dict())


def handle_update(user: User, budget_id: int, body: dict) -> dict:
    """Update a budget.

    Args:
        user: Authenticated user
        budget_id: Budget ID
        body: Fields to update

    Returns:
        Response with updated budget
    """
    existing = database.get_budget(user.id, budget_id)
    if existing is None:
        return not_found('Budget')

    fields = _validate_budget(user, body, partial=True, existing=existing)
    budget = database.update_budget(user.id, budget_id, fields)
    return success_response(budget.to_dict(), message='Budget updated successfully')


def handle_delete(user: User, budget_id: int) -> dict:
    if database.get_budget(user.id, budget_id) is None:
        return not_found('Budget')

    database.delete_budget(user.id, budget_id)
    return success_response(None, message='Budget deleted successfully')


def handle_summary(user: User, query: dict) -> dict:
    """Portfolio summary over active budgets."""
    today = parse_as_of(query.get('as_of_date'))
    progress = _evaluate(user, database.get_budgets(user.id), today)
    return success_response(budget_calc.get_budget_summary(progress))


def handle_alerts(user: User, query: dict) -> dict:
    """Alerts for exceeded and near-limit active budgets."""
    today = parse_as_of(query.get('as_of_date'))
    progress = _evaluate(user, database.get_budgets(user.id), today)
    return success_response(budget_calc.check_alerts(progress, user.currency))


def handle_performance(user: User, query: dict) -> dict:
    """Status of each active budget of one period kind.

    Query:
        period: weekly, monthly (default) or yearly
        as_of_date: Reference date (default today)
    """
    period_value = query.get('period') or BudgetPeriod.MONTHLY.value
    if period_value not in BUDGET_PERIODS:
        period_value = BudgetPeriod.MONTHLY.value
    period = BudgetPeriod(period_value)

    today = parse_as_of(query.get('as_of_date'))
    progress = _evaluate(user, database.get_budgets(user.id, period=period.value), today)

    return success_response({
        'period': period.value,
        'budgets': budget_calc.get_performance(progress, period)
    })
