"""Category management routes."""

from finflow.models.entities import TransactionType, User
from finflow.services import database
from finflow.utils.http import error_response, not_found, success_response
from finflow.utils.validation import COLOR_PATTERN, Validator

CATEGORY_TYPES = [t.value for t in TransactionType]


def _validate_category(body: dict, partial: bool = False) -> dict:
    validator = Validator(body, partial=partial)
    validator.string('name', max_length=50)
    validator.choice('type', CATEGORY_TYPES)
    validator.string('color', required=False, pattern=COLOR_PATTERN)
    return validator.validate()


def handle_list(user: User, query: dict) -> dict:
    """List categories with transaction counts.

    Args:
        user: Authenticated user
        query: Query parameters (type optional: income, expense)

    Returns:
        Response with category list
    """
    category_type = query.get('type')
    if category_type and category_type not in CATEGORY_TYPES:
        category_type = None

    categories = database.get_categories(user.id, category_type)
    return success_response([c.to_dict() for c in categories])


def handle_create(user: User, body: dict) -> dict:
    """Create a category. A palette colour is assigned when none is given."""
    fields = _validate_category(body)
    category = database.create_category(user.id, fields['name'], fields['type'], fields.get('color'))
    return success_response(category.to_dict(), status_code=201, message='Category created successfully')


def handle_get(user: User, category_id: int) -> dict:
    category = database.get_category(user.id, category_id)
    if category is None:
        return not_found('Category')
    return success_response(category.to_dict())


def handle_update(user: User, category_id: int, body: dict) -> dict:
    """Update a category.

    Args:
        user: Authenticated user
        category_id: Category ID
        body: Fields to update (name, type, color)

    Returns:
        Response with updated category
    """
    if database.get_category(user.id, category_id) is None:
        return not_found('Category')

    fields = _validate_category(body, partial=True)
    category = database.update_category(user.id, category_id, fields)
    return success_response(category.to_dict(), message='Category updated successfully')


def handle_delete(user: User, category_id: int) -> dict:
    """Delete a category. Seeded defaults and categories in use are protected."""
    category = database.get_category(user.id, category_id)
    if category is None:
        return not_found('Category')

    if category.is_default:
        return error_response(403, 'FORBIDDEN', 'Default categories cannot be deleted')

    if category.transaction_count:
        return error_response(422, 'HAS_TRANSACTIONS',
                              'Cannot delete a category that has transactions')

    database.delete_category(user.id, category_id)
    return success_response(None, message='Category deleted successfully')
