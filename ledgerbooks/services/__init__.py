"""
Service layer for the Ledgerbooks backend.

Contains the business logic between routes (HTTP layer) and the database:
- Validates input and returns ServiceResult values for expected failures
- Stages every multi-row write in a UnitOfWork and commits it once
- Scopes every query by the authenticated user_id
"""

from .account_service import (
    create_account,
    get_account_by_id,
    get_user_accounts,
    require_account,
)
from .balance_service import apply_effect, effect_of, revert_effect
from .bank_transaction_service import (
    categorize_transaction,
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_transaction_categories,
    get_transaction_summary,
    list_transactions,
    reconcile_transaction,
    update_transaction,
)
from .resource_service import (
    Resource,
    create_resource,
    delete_resource,
    get_resource,
    list_resources,
    update_resource,
)
from .session_service import (
    SessionTokens,
    create_access_token,
    decode_access_token,
    issue_session,
    logout,
    refresh_session,
)

__all__ = [
    "Resource",
    "SessionTokens",
    "apply_effect",
    "categorize_transaction",
    "create_access_token",
    "create_account",
    "create_resource",
    "create_transaction",
    "decode_access_token",
    "delete_resource",
    "delete_transaction",
    "effect_of",
    "get_account_by_id",
    "get_resource",
    "get_transaction_by_id",
    "get_transaction_categories",
    "get_transaction_summary",
    "get_user_accounts",
    "issue_session",
    "list_resources",
    "list_transactions",
    "logout",
    "reconcile_transaction",
    "refresh_session",
    "require_account",
    "revert_effect",
    "update_resource",
    "update_transaction",
]
