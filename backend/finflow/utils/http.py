"""API Gateway response helpers."""

import base64
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type,Authorization',
    'Access-Control-Allow-Methods': 'GET,POST,PUT,DELETE,OPTIONS'
}


def json_default(value: Any) -> Any:
    """JSON encoder fallback for money and date values."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    raise TypeError(f'Object of type {type(value).__name__} is not JSON serializable')


def make_response(status_code: int, body: Any, content_type: str = 'application/json',
                  extra_headers: Optional[dict] = None) -> dict:
    """Create API Gateway response.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON-encoded if dict/list)
        content_type: Content-Type header
        extra_headers: Additional headers

    Returns:
        API Gateway response dict
    """
    headers = {'Content-Type': content_type}
    headers.update(CORS_HEADERS)
    if extra_headers:
        headers.update(extra_headers)

    if isinstance(body, (dict, list)):
        body = json.dumps(body, default=json_default)

    return {
        'statusCode': status_code,
        'headers': headers,
        'body': body
    }


def success_response(data: Any = None, status_code: int = 200, message: Optional[str] = None) -> dict:
    """Wrap data in the success envelope."""
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    return make_response(status_code, body)


def error_response(status_code: int, code: str, message: str, errors: Optional[dict] = None) -> dict:
    """Create error response.

    Args:
        status_code: HTTP status code
        code: Machine-readable error code
        message: Error message
        errors: Per-field validation messages

    Returns:
        API Gateway response dict
    """
    error = {'code': code, 'message': message}
    if errors:
        error['errors'] = errors
    return make_response(status_code, {'success': False, 'error': error})


def not_found(entity: str) -> dict:
    return error_response(404, 'NOT_FOUND', f'{entity} not found')


def csv_response(content: str, filename: str) -> dict:
    """CSV download response."""
    return make_response(200, content, content_type='text/csv', extra_headers={
        'Content-Disposition': f'attachment; filename="{filename}"'
    })


def pdf_response(pdf_bytes: bytes, filename: str) -> dict:
    """PDF download response, base64 encoded for API Gateway."""
    response = make_response(
        200,
        base64.b64encode(pdf_bytes).decode('utf-8'),
        content_type='application/pdf',
        extra_headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )
    response['isBase64Encoded'] = True
    return response
