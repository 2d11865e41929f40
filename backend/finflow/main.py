"""Main Lambda handler for the FinFlow API."""

import json
from typing import Any, Optional

from aws_lambda_powertools import Logger

from finflow.routes import auth
from finflow.services.transfer import TransferError
from finflow.utils.auth import get_current_user
from finflow.utils.http import error_response, make_response
from finflow.utils.validation import ValidationError

logger = Logger(service="finflow-api")

API_PREFIX = '/api/v1'


def handler(event: dict, context: Any) -> dict:
    """Lambda handler for API Gateway events.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        # Parse request
        http_method = event.get('requestContext', {}).get('http', {}).get('method') \
            or event.get('httpMethod', 'GET')
        path = event.get('rawPath', event.get('path', '/'))
        headers = event.get('headers') or {}
        body_str = event.get('body') or '{}'

        # Handle CORS preflight
        if http_method == 'OPTIONS':
            return make_response(200, '')

        # Parse body
        try:
            body = json.loads(body_str) if body_str else {}
        except json.JSONDecodeError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        # Query parameters
        query_params = event.get('queryStringParameters') or {}

        return route_request(http_method, path, headers, body, query_params)

    except ValidationError as e:
        return error_response(422, 'VALIDATION_ERROR', str(e), e.errors)

    except TransferError as e:
        logger.warning("Transfer rejected", extra={"code": e.code})
        return error_response(422, e.code, e.message)

    except Exception:
        logger.exception("Unhandled error")
        return error_response(500, 'INTERNAL_ERROR', 'An unexpected error occurred')


def _resource_id(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def route_request(method: str, path: str, headers: dict, body: dict, query: dict) -> dict:
    """Route request to appropriate handler.

    Args:
        method: HTTP method
        path: Request path
        headers: Request headers
        body: Request body
        query: Query parameters

    Returns:
        API Gateway response
    """
    # Remove /prod prefix if present (API Gateway stage)
    if path.startswith('/prod'):
        path = path[5:]

    path = path.rstrip('/')
    if not path.startswith(API_PREFIX):
        return error_response(404, 'NOT_FOUND', f'Route not found: {method} {path}')

    parts = path[len(API_PREFIX):].strip('/').split('/')
    resource = parts[0]

    # Auth routes (no authentication required)
    if path == f'{API_PREFIX}/auth/register' and method == 'POST':
        return auth.handle_register(body)

    if path == f'{API_PREFIX}/auth/login' and method == 'POST':
        return auth.handle_login(body)

    if path == f'{API_PREFIX}/auth/verify' and method == 'GET':
        return auth.handle_verify(headers)

    # All other routes require authentication
    user = get_current_user(headers)
    if user is None:
        return error_response(401, 'UNAUTHORIZED', 'Authentication required')

    # Import route handlers (lazy to avoid circular imports)
    from finflow.routes import accounts, budgets, categories, dashboard, export, reports, settings, transactions

    # Settings
    if resource == 'settings':
        if len(parts) == 1:
            if method == 'GET':
                return settings.handle_get(user)
            if method == 'PUT':
                return settings.handle_update(user, body)
        elif parts[1:] == ['password'] and method == 'PUT':
            return settings.handle_change_password(user, body)
        elif parts[1:] == ['account'] and method == 'DELETE':
            return settings.handle_delete_account(user, body)

    # Dashboard, insights, forecast
    if parts == ['dashboard'] and method == 'GET':
        return dashboard.handle_get_dashboard(user, query)

    if parts == ['insights'] and method == 'GET':
        return dashboard.handle_insights(user, query)

    if parts == ['forecast'] and method == 'GET':
        return dashboard.handle_forecast(user, query)

    # Transactions
    if resource == 'transactions':
        if len(parts) == 1:
            if method == 'GET':
                return transactions.handle_list_transactions(user, query)
            if method == 'POST':
                return transactions.handle_create(user, body)
        elif len(parts) == 2 and _resource_id(parts[1]) is not None:
            transaction_id = _resource_id(parts[1])
            if method == 'GET':
                return transactions.handle_get(user, transaction_id)
            if method == 'PUT':
                return transactions.handle_update(user, transaction_id, body)
            if method == 'DELETE':
                return transactions.handle_delete(user, transaction_id)

    # Categories
    if resource == 'categories':
        if len(parts) == 1:
            if method == 'GET':
                return categories.handle_list(user, query)
            if method == 'POST':
                return categories.handle_create(user, body)
        elif len(parts) == 2 and _resource_id(parts[1]) is not None:
            category_id = _resource_id(parts[1])
            if method == 'GET':
                return categories.handle_get(user, category_id)
            if method == 'PUT':
                return categories.handle_update(user, category_id, body)
            if method == 'DELETE':
                return categories.handle_delete(user, category_id)

    # Accounts
    if resource == 'accounts':
        if len(parts) == 1:
            if method == 'GET':
                return accounts.handle_list(user)
            if method == 'POST':
                return accounts.handle_create(user, body)
        elif parts[1:] == ['transfer'] and method == 'POST':
            return accounts.handle_transfer(user, body)
        elif _resource_id(parts[1]) is not None:
            account_id = _resource_id(parts[1])
            if len(parts) == 3 and parts[2] == 'balance-history' and method == 'GET':
                return accounts.handle_balance_history(user, account_id, query)
            if len(parts) == 2:
                if method == 'GET':
                    return accounts.handle_get(user, account_id)
                if method == 'PUT':
                    return accounts.handle_update(user, account_id, body)
                if method == 'DELETE':
                    return accounts.handle_delete(user, account_id)

    # Budgets
    if resource == 'budgets':
        if len(parts) == 1:
            if method == 'GET':
                return budgets.handle_list(user, query)
            if method == 'POST':
                return budgets.handle_create(user, body)
        elif parts[1:] == ['summary'] and method == 'GET':
            return budgets.handle_summary(user, query)
        elif parts[1:] == ['alerts'] and method == 'GET':
            return budgets.handle_alerts(user, query)
        elif parts[1:] == ['performance'] and method == 'GET':
            return budgets.handle_performance(user, query)
        elif len(parts) == 2 and _resource_id(parts[1]) is not None:
            budget_id = _resource_id(parts[1])
            if method == 'GET':
                return budgets.handle_get(user, budget_id, query)
            if method == 'PUT':
                return budgets.handle_update(user, budget_id, body)
            if method == 'DELETE':
                return budgets.handle_delete(user, budget_id)

    # Reports
    if parts == ['reports', 'monthly'] and method == 'GET':
        return reports.handle_monthly(user, query)

    if parts == ['reports', 'monthly', 'pdf'] and method == 'GET':
        return reports.handle_monthly_pdf(user, query)

    if parts == ['reports', 'balance-history'] and method == 'GET':
        return reports.handle_balance_history(user, query)

    # Export
    if resource == 'export' and method == 'GET':
        if parts == ['export', 'all']:
            return export.handle_export_all(user)
        if parts == ['export', 'monthly']:
            return export.handle_export_monthly(user, query)
        if len(parts) == 3 and parts[1] == 'category' and _resource_id(parts[2]) is not None:
            return export.handle_export_category(user, _resource_id(parts[2]))

    # Not found
    return error_response(404, 'NOT_FOUND', f'Route not found: {method} {path}')
