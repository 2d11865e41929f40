"""Database service for SQLite operations."""

import os
import sqlite3
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Generator, Iterable, List, Optional, Tuple

from aws_lambda_powertools import Logger

from finflow.models.defaults import DEFAULT_CATEGORIES, palette_color
from finflow.models.entities import Account, Budget, Category, Transaction, User
from finflow.utils import s3

logger = Logger(service="finflow-database")

# Database file locations
DB_KEY = 'finflow.db'
_db_connection: Optional[sqlite3.Connection] = None
_db_path: Optional[str] = None

# Store money as REAL, dates as ISO strings
sqlite3.register_adapter(Decimal, float)
sqlite3.register_adapter(date, lambda d: d.isoformat())


def get_sql_path(filename: str) -> str:
    """Get path to SQL file in package."""
    return str(Path(__file__).parent.parent / 'sql' / filename)


def get_db_path() -> str:
    """Get the local database file path."""
    return os.environ.get('FINFLOW_DB_PATH') or s3.get_temp_path(DB_KEY)


def init_db(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they don't exist.

    Args:
        conn: SQLite connection
    """
    with open(get_sql_path('schema.sql'), 'r') as f:
        conn.executescript(f.read())
    conn.commit()


def get_connection() -> sqlite3.Connection:
    """Get database connection, downloading from S3 if configured.

    Returns:
        SQLite connection with row factory set
    """
    global _db_connection, _db_path

    if _db_connection is not None:
        return _db_connection

    _db_path = get_db_path()

    if s3.is_enabled() and s3.file_exists(DB_KEY):
        s3.download_file(DB_KEY, _db_path)

    _db_connection = sqlite3.connect(_db_path)
    _db_connection.row_factory = sqlite3.Row
    _db_connection.execute("PRAGMA foreign_keys = ON")
    init_db(_db_connection)

    logger.debug("Opened ledger database", extra={"path": _db_path, "s3": s3.is_enabled()})
    return _db_connection


def save_db() -> None:
    """Commit and, when S3 is configured, upload the database file."""
    global _db_connection, _db_path

    if _db_connection is not None and _db_path is not None:
        _db_connection.commit()
        if s3.is_enabled():
            s3.upload_file(_db_path, DB_KEY)


def close_db() -> None:
    """Close database connection."""
    global _db_connection, _db_path

    if _db_connection is not None:
        _db_connection.close()
        _db_connection = None
        _db_path = None


@contextmanager
def transaction() -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database transactions.

    Yields:
        SQLite connection

    Commits on success, rolls back on exception, saves to S3.
    """
    conn = get_connection()
    try:
        yield conn
        conn.commit()
        save_db()
    except Exception:
        conn.rollback()
        raise


def execute(sql: str, params: tuple = ()) -> sqlite3.Cursor:
    """Execute SQL and return cursor."""
    conn = get_connection()
    return conn.execute(sql, params)


def fetch_one(sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
    """Fetch a single row."""
    return execute(sql, params).fetchone()


def fetch_all(sql: str, params: tuple = ()) -> List[sqlite3.Row]:
    """Fetch all rows."""
    return execute(sql, params).fetchall()


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[dict]:
    """Convert a Row to a dict."""
    if row is None:
        return None
    return dict(row)


def rows_to_dicts(rows: List[sqlite3.Row]) -> List[dict]:
    """Convert Rows to list of dicts."""
    return [dict(row) for row in rows]


def _update_row(table: str, row_id: int, user_id: int, fields: Dict[str, Any],
                allowed: Iterable[str]) -> None:
    """Update whitelisted columns of a user-owned row."""
    updates = []
    params: List[Any] = []

    for column in allowed:
        if column in fields:
            updates.append(f"{column} = ?")
            params.append(fields[column])

    if not updates:
        return

    updates.append("updated_at = datetime('now')")
    params.extend([row_id, user_id])

    with transaction():
        execute(
            f"UPDATE {table} SET {', '.join(updates)} WHERE id = ? AND user_id = ?",
            tuple(params)
        )


# =============================================================================
# Users
# =============================================================================

def get_user(user_id: int) -> Optional[User]:
    """Get a user by ID."""
    row = fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
    return User.from_dict(dict(row)) if row else None


def get_user_by_email(email: str) -> Optional[User]:
    """Get a user by email (case-insensitive)."""
    row = fetch_one("SELECT * FROM users WHERE LOWER(email) = LOWER(?)", (email,))
    return User.from_dict(dict(row)) if row else None


def create_user(name: str, email: str, password_hash: str, currency: str = 'IDR') -> User:
    """Create a user together with their default categories.

    Both the user row and the seeded categories are written in one
    transaction, so a user never exists without categories.

    Args:
        name: Display name
        email: Login email
        password_hash: Bcrypt hash
        currency: ISO currency code

    Returns:
        Created user
    """
    with transaction() as conn:
        cursor = conn.execute(
            "INSERT INTO users (name, email, password_hash, currency) VALUES (?, ?, ?, ?)",
            (name, email, password_hash, currency)
        )
        user_id = cursor.lastrowid
        seed_default_categories(conn, user_id)

    logger.info("User registered", extra={"user_id": user_id})
    return get_user(user_id)


def update_user(user_id: int, fields: dict) -> Optional[User]:
    """Update a user's name, email or currency."""
    updates = []
    params: List[Any] = []

    for column in ('name', 'email', 'currency'):
        if column in fields:
            updates.append(f"{column} = ?")
            params.append(fields[column])

    if updates:
        updates.append("updated_at = datetime('now')")
        params.append(user_id)
        with transaction():
            execute(f"UPDATE users SET {', '.join(updates)} WHERE id = ?", tuple(params))

    return get_user(user_id)


def update_password(user_id: int, password_hash: str) -> None:
    """Replace a user's password hash."""
    with transaction():
        execute(
            "UPDATE users SET password_hash = ?, updated_at = datetime('now') WHERE id = ?",
            (password_hash, user_id)
        )

    logger.info("Password changed", extra={"user_id": user_id})


def delete_user(user_id: int) -> None:
    """Delete a user and everything they own.

    Rows are removed children first in a single transaction.

    Args:
        user_id: User to remove
    """
    with transaction() as conn:
        for table in ('transactions', 'budgets', 'categories', 'accounts'):
            conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
        conn.execute("DELETE FROM users WHERE id = ?", (user_id,))

    logger.info("User deleted", extra={"user_id": user_id})


def seed_default_categories(conn: sqlite3.Connection, user_id: int,
                            categories: Optional[List[dict]] = None) -> None:
    """Insert the default category set for a user.

    Args:
        conn: Connection inside an open transaction
        user_id: Owner
        categories: Category definitions (defaults to DEFAULT_CATEGORIES)
    """
    conn.executemany(
        "INSERT INTO categories (user_id, name, type, color, is_default) VALUES (?, ?, ?, ?, 1)",
        [(user_id, c['name'], c['type'], c['color']) for c in (categories or DEFAULT_CATEGORIES)]
    )


# =============================================================================
# Categories
# =============================================================================

def get_categories(user_id: int, category_type: Optional[str] = None) -> List[Category]:
    """Get a user's categories with transaction counts.

    Args:
        user_id: Owner
        category_type: Filter by type (income, expense)

    Returns:
        Categories ordered by name
    """
    sql = """
        SELECT c.*,
               (SELECT COUNT(*) FROM transactions t WHERE t.category_id = c.id) as transaction_count
        FROM categories c
        WHERE c.user_id = ?
    """
    params: List[Any] = [user_id]

    if category_type:
        sql += " AND c.type = ?"
        params.append(category_type)

    sql += " ORDER BY c.name, c.id"
    return [Category.from_dict(d) for d in rows_to_dicts(fetch_all(sql, tuple(params)))]


def get_category(user_id: int, category_id: int) -> Optional[Category]:
    """Get a category owned by the user."""
    row = fetch_one("""
        SELECT c.*,
               (SELECT COUNT(*) FROM transactions t WHERE t.category_id = c.id) as transaction_count
        FROM categories c
        WHERE c.id = ? AND c.user_id = ?
    """, (category_id, user_id))
    return Category.from_dict(dict(row)) if row else None


def find_category(user_id: int, category_type: str, name: Optional[str] = None) -> Optional[Category]:
    """Find a user's category of a type, by name or the first one.

    Args:
        user_id: Owner
        category_type: income or expense
        name: Exact name to match; None returns the lowest-id category of the type

    Returns:
        Category or None
    """
    sql = "SELECT * FROM categories WHERE user_id = ? AND type = ?"
    params: List[Any] = [user_id, category_type]

    if name is not None:
        sql += " AND name = ?"
        params.append(name)

    sql += " ORDER BY id LIMIT 1"
    row = fetch_one(sql, tuple(params))
    return Category.from_dict(dict(row)) if row else None


def count_categories(user_id: int, category_type: str) -> int:
    """Count a user's categories of one type."""
    row = fetch_one(
        "SELECT COUNT(*) as count FROM categories WHERE user_id = ? AND type = ?",
        (user_id, category_type)
    )
    return row['count'] if row else 0


def create_category(user_id: int, name: str, category_type: str,
                    color: Optional[str] = None) -> Category:
    """Create a category, assigning a palette colour when none is given."""
    if not color:
        color = palette_color(category_type, count_categories(user_id, category_type))

    with transaction() as conn:
        cursor = conn.execute(
            "INSERT INTO categories (user_id, name, type, color, is_default) VALUES (?, ?, ?, ?, 0)",
            (user_id, name, category_type, color)
        )
        category_id = cursor.lastrowid

    return get_category(user_id, category_id)


def update_category(user_id: int, category_id: int, fields: dict) -> Optional[Category]:
    """Update a category's name, type or colour."""
    _update_row('categories', category_id, user_id, fields, ('name', 'type', 'color'))
    return get_category(user_id, category_id)


def delete_category(user_id: int, category_id: int) -> None:
    """Delete a category. Budgets scoped to it become unscoped."""
    with transaction():
        execute("DELETE FROM categories WHERE id = ? AND user_id = ?", (category_id, user_id))


# =============================================================================
# Accounts
# =============================================================================

_ACCOUNT_SELECT = """
    SELECT a.*,
           (SELECT COUNT(*) FROM transactions t WHERE t.account_id = a.id) as transaction_count
    FROM accounts a
"""


def get_accounts(user_id: int, active_only: bool = False) -> List[Account]:
    """Get a user's accounts ordered by name."""
    sql = _ACCOUNT_SELECT + " WHERE a.user_id = ?"
    if active_only:
        sql += " AND a.is_active = 1"
    sql += " ORDER BY a.name, a.id"
    return [Account.from_dict(d) for d in rows_to_dicts(fetch_all(sql, (user_id,)))]


def get_account(user_id: int, account_id: int) -> Optional[Account]:
    """Get an account owned by the user."""
    row = fetch_one(_ACCOUNT_SELECT + " WHERE a.id = ? AND a.user_id = ?", (account_id, user_id))
    return Account.from_dict(dict(row)) if row else None


def create_account(user_id: int, fields: dict) -> Account:
    """Create an account."""
    with transaction() as conn:
        cursor = conn.execute("""
            INSERT INTO accounts (user_id, name, type, initial_balance, currency, icon, color, is_active)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            fields['name'],
            fields['type'],
            fields.get('initial_balance') or Decimal('0'),
            fields.get('currency') or 'IDR',
            fields.get('icon'),
            fields.get('color'),
            1 if fields.get('is_active', True) else 0
        ))
        account_id = cursor.lastrowid

    return get_account(user_id, account_id)


def update_account(user_id: int, account_id: int, fields: dict) -> Optional[Account]:
    """Update an account."""
    _update_row('accounts', account_id, user_id, fields,
                ('name', 'type', 'initial_balance', 'currency', 'icon', 'color', 'is_active'))
    return get_account(user_id, account_id)


def delete_account(user_id: int, account_id: int) -> None:
    """Delete an account. Callers check it has no transactions first."""
    with transaction():
        execute("DELETE FROM accounts WHERE id = ? AND user_id = ?", (account_id, user_id))


# =============================================================================
# Transactions
# =============================================================================

_TRANSACTION_SELECT = """
    SELECT t.*, c.name as category_name, c.color as category_color
    FROM transactions t
    LEFT JOIN categories c ON t.category_id = c.id
"""


def _transaction_filters(user_id: int, filters: dict) -> Tuple[str, List[Any]]:
    """Build the WHERE clause shared by transaction queries."""
    where = " WHERE t.user_id = ?"
    params: List[Any] = [user_id]

    if filters.get('type'):
        where += " AND t.type = ?"
        params.append(filters['type'])

    if filters.get('account_id'):
        where += " AND t.account_id = ?"
        params.append(int(filters['account_id']))

    if filters.get('category_id'):
        where += " AND t.category_id = ?"
        params.append(int(filters['category_id']))

    if filters.get('spending_type'):
        where += " AND t.spending_type = ?"
        params.append(filters['spending_type'])

    if filters.get('start_date'):
        where += " AND t.transaction_date >= ?"
        params.append(filters['start_date'])

    if filters.get('end_date'):
        where += " AND t.transaction_date <= ?"
        params.append(filters['end_date'])

    if filters.get('month'):
        where += " AND strftime('%Y-%m', t.transaction_date) = ?"
        params.append(filters['month'])

    return where, params


def get_transactions(user_id: int, **filters: Any) -> List[Transaction]:
    """Get a user's transactions in ledger order (oldest first).

    Args:
        user_id: Owner
        **filters: type, account_id, category_id, spending_type,
            start_date, end_date (inclusive), month (YYYY-MM)

    Returns:
        List of transactions
    """
    where, params = _transaction_filters(user_id, filters)
    sql = _TRANSACTION_SELECT + where + " ORDER BY t.transaction_date, t.id"
    return [Transaction.from_dict(d) for d in rows_to_dicts(fetch_all(sql, tuple(params)))]


def list_transactions(user_id: int, filters: dict, page: int = 1,
                      per_page: int = 20) -> Tuple[List[Transaction], int]:
    """Get one page of transactions, newest first.

    Returns:
        Tuple of (transactions, total matching count)
    """
    where, params = _transaction_filters(user_id, filters)

    count_row = fetch_one("SELECT COUNT(*) as count FROM transactions t" + where, tuple(params))
    total = count_row['count'] if count_row else 0

    sql = _TRANSACTION_SELECT + where + " ORDER BY t.transaction_date DESC, t.created_at DESC, t.id DESC"
    sql += " LIMIT ? OFFSET ?"
    rows = fetch_all(sql, tuple(params + [per_page, (page - 1) * per_page]))

    return [Transaction.from_dict(d) for d in rows_to_dicts(rows)], total


def get_transaction(user_id: int, transaction_id: int) -> Optional[Transaction]:
    """Get a transaction owned by the user."""
    row = fetch_one(_TRANSACTION_SELECT + " WHERE t.id = ? AND t.user_id = ?", (transaction_id, user_id))
    return Transaction.from_dict(dict(row)) if row else None


def insert_transaction(conn: sqlite3.Connection, user_id: int, category_id: int,
                       txn_type: str, amount: Decimal, transaction_date: date,
                       account_id: Optional[int] = None, note: Optional[str] = None,
                       spending_type: Optional[str] = None) -> int:
    """Insert a transaction on an open connection.

    Does not commit; use inside transaction() so several inserts can
    succeed or fail together.

    Returns:
        New transaction ID
    """
    cursor = conn.execute("""
        INSERT INTO transactions (
            user_id, category_id, account_id, type, amount,
            transaction_date, note, spending_type
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    """, (user_id, category_id, account_id, txn_type, amount, transaction_date, note, spending_type))
    return cursor.lastrowid


def create_transaction(user_id: int, fields: dict) -> Transaction:
    """Create a single transaction."""
    with transaction() as conn:
        transaction_id = insert_transaction(
            conn,
            user_id,
            fields['category_id'],
            fields['type'],
            fields['amount'],
            fields['transaction_date'],
            account_id=fields.get('account_id'),
            note=fields.get('note'),
            spending_type=fields.get('spending_type')
        )

    return get_transaction(user_id, transaction_id)


def update_transaction(user_id: int, transaction_id: int, fields: dict) -> Optional[Transaction]:
    """Update a transaction."""
    _update_row('transactions', transaction_id, user_id, fields,
                ('category_id', 'account_id', 'type', 'amount', 'transaction_date', 'note', 'spending_type'))
    return get_transaction(user_id, transaction_id)


def delete_transaction(user_id: int, transaction_id: int) -> None:
    """Delete a transaction."""
    with transaction():
        execute("DELETE FROM transactions WHERE id = ? AND user_id = ?", (transaction_id, user_id))


# =============================================================================
# Budgets
# =============================================================================

_BUDGET_SELECT = """
    SELECT b.*, c.name as category_name, c.color as category_color
    FROM budgets b
    LEFT JOIN categories c ON b.category_id = c.id
"""


def get_budgets(user_id: int, active_only: bool = True, period: Optional[str] = None) -> List[Budget]:
    """Get a user's budgets ordered by name.

    Args:
        user_id: Owner
        active_only: Only return active budgets
        period: Filter by period kind (weekly, monthly, yearly)
    """
    sql = _BUDGET_SELECT + " WHERE b.user_id = ?"
    params: List[Any] = [user_id]

    if active_only:
        sql += " AND b.is_active = 1"

    if period:
        sql += " AND b.period = ?"
        params.append(period)

    sql += " ORDER BY b.name, b.id"
    return [Budget.from_dict(d) for d in rows_to_dicts(fetch_all(sql, tuple(params)))]


def get_budget(user_id: int, budget_id: int) -> Optional[Budget]:
    """Get a budget owned by the user."""
    row = fetch_one(_BUDGET_SELECT + " WHERE b.id = ? AND b.user_id = ?", (budget_id, user_id))
    return Budget.from_dict(dict(row)) if row else None


def create_budget(user_id: int, fields: dict) -> Budget:
    """Create a budget."""
    with transaction() as conn:
        cursor = conn.execute("""
            INSERT INTO budgets (
                user_id, category_id, name, amount, period,
                start_date, end_date, alert_threshold, is_active
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            fields.get('category_id'),
            fields['name'],
            fields['amount'],
            fields['period'],
            fields['start_date'],
            fields.get('end_date'),
            fields.get('alert_threshold') or 80,
            1 if fields.get('is_active', True) else 0
        ))
        budget_id = cursor.lastrowid

    logger.info("Budget created", extra={"user_id": user_id, "budget_id": budget_id})
    return get_budget(user_id, budget_id)


def update_budget(user_id: int, budget_id: int, fields: dict) -> Optional[Budget]:
    """Update a budget."""
    _update_row('budgets', budget_id, user_id, fields,
                ('category_id', 'name', 'amount', 'period', 'start_date',
                 'end_date', 'alert_threshold', 'is_active'))
    return get_budget(user_id, budget_id)


def delete_budget(user_id: int, budget_id: int) -> None:
    """Delete a budget."""
    with transaction():
        execute("DELETE FROM budgets WHERE id = ? AND user_id = ?", (budget_id, user_id))
