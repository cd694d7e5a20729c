"""
Generic user-scoped CRUD for the business-document resources.

Invoices, estimates, expenses, vendors, projects and timesheets share the
same lifecycle: create, get, list, update, delete, always scoped by the
authenticated user_id. Each resource is described by a `Resource` whose
hooks fill in defaults and computed fields (totals, document numbers).

Hooks raise ValueError for bad input; the service turns it into a
VALIDATION result.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ledgerbooks.db import Database, PersistenceError, Query, RowNotFoundError, UnitOfWork
from ledgerbooks.utils.errors import ErrorKind, ServiceResult
from ledgerbooks.utils.money import ZERO, money_str, to_money

logger = logging.getLogger(__name__)

# Never writable through a payload
PROTECTED_FIELDS = ("id", "user_id", "created_at", "updated_at")


class Resource:
    """Description of one CRUD resource."""

    def __init__(
        self,
        table: str,
        label: str,
        search_columns: Sequence[str] = (),
        date_column: Optional[str] = None,
        order_by: str = "created_at",
        order_desc: bool = True,
        defaults: Optional[Dict[str, Any]] = None,
        amount_fields: Sequence[str] = (),
        choices: Optional[Dict[str, Tuple[str, ...]]] = None,
    ):
        self.table = table
        self.label = label
        self.search_columns = tuple(search_columns)
        self.date_column = date_column
        self.order_by = order_by
        self.order_desc = order_desc
        self.defaults = dict(defaults or {})
        self.amount_fields = tuple(amount_fields)
        self.choices = dict(choices or {})

    def normalize(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Quantize 2-place amount fields (which must be non-negative) and check enumerated fields.

        Raises:
            ValueError: on a negative or non-numeric amount or an unknown choice
        """
        data = dict(values)
        for field in self.amount_fields:
            if data.get(field) is None:
                continue
            try:
                amount = to_money(data[field])
            except ValueError as e:
                raise ValueError(f"{field}: {e}") from e
            if amount < ZERO:
                raise ValueError(f"{field} must be non-negative")
            data[field] = money_str(amount)
        for field, allowed in self.choices.items():
            if data.get(field) is not None and data[field] not in allowed:
                raise ValueError(f"{field} must be one of {', '.join(allowed)}")
        return data

    async def prepare_create(self, db: Database, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Return the values to insert. Raise ValueError to reject."""
        return self.normalize(values)

    async def prepare_update(
        self,
        db: Database,
        user_id: str,
        existing: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Return the changes to write. Raise ValueError to reject."""
        return self.normalize(changes)

    def __repr__(self) -> str:
        return f"Resource({self.table!r})"


def _writable(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if key not in PROTECTED_FIELDS}


async def get_resource(
    db: Database,
    resource: Resource,
    user_id: str,
    resource_id: str,
) -> Optional[Dict[str, Any]]:
    """Fetch one record owned by `user_id`, or None."""
    record = await db.get(resource.table, resource_id)
    if not record or record.get("user_id") != user_id:
        logger.warning(f"{resource.label} {resource_id} not found for user {user_id}")
        return None
    return record


async def list_resources(
    db: Database,
    resource: Resource,
    user_id: str,
    filters: Optional[Dict[str, Any]] = None,
    search: Optional[str] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """
    List the user's records in the resource's order (newest first by default).

    Args:
        filters: Column equality filters; None values and "all" are ignored
        search: Case-insensitive substring over the resource's search columns
        from_date, to_date: Inclusive range over the resource's date column
    """
    query = Query(resource.table).eq("user_id", user_id)

    for column, value in (filters or {}).items():
        if value is None or value == "all":
            continue
        query = query.eq(column, value)

    if search and resource.search_columns:
        query = query.search(resource.search_columns, search)

    if resource.date_column:
        if from_date:
            query = query.gte(resource.date_column, from_date)
        if to_date:
            query = query.lte(resource.date_column, to_date)

    tiebreak = "created_at" if resource.order_by != "created_at" else None
    query = query.order(resource.order_by, desc=resource.order_desc, then_by=tiebreak)
    if limit is not None:
        query = query.page(offset, limit)

    records = await db.fetch(query)
    logger.info(f"Fetched {len(records)} {resource.table} records for user {user_id}")
    return records


async def create_resource(
    db: Database,
    resource: Resource,
    user_id: str,
    values: Dict[str, Any],
) -> ServiceResult[Dict[str, Any]]:
    """
    Create a record owned by `user_id`.

    Returns:
        ServiceResult with the stored record, or VALIDATION / PERSISTENCE
    """
    data = {**resource.defaults, **{k: v for k, v in _writable(values).items() if v is not None}}

    try:
        data = await resource.prepare_create(db, user_id, data)
    except ValueError as e:
        return ServiceResult.failure(ErrorKind.VALIDATION, str(e))

    uow = UnitOfWork(f"create_{resource.table}")
    record = uow.insert(resource.table, {**data, "user_id": user_id})

    try:
        await db.commit(uow)
    except PersistenceError as e:
        logger.error(f"Failed to create {resource.label} for user {user_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, f"Failed to save {resource.label.lower()}")

    logger.info(f"{resource.label} created: id={record['id']}, user_id={user_id}")
    return ServiceResult.success(record)


async def update_resource(
    db: Database,
    resource: Resource,
    user_id: str,
    resource_id: str,
    changes: Dict[str, Any],
) -> ServiceResult[Dict[str, Any]]:
    """
    Partially update a record.

    Returns:
        ServiceResult with the updated record, NOT_FOUND, VALIDATION or PERSISTENCE
    """
    existing = await get_resource(db, resource, user_id, resource_id)
    if not existing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"{resource.label} {resource_id} not found")

    update_data = _writable(changes)
    try:
        update_data = await resource.prepare_update(db, user_id, existing, update_data)
    except ValueError as e:
        return ServiceResult.failure(ErrorKind.VALIDATION, str(e))

    if not update_data:
        logger.warning(f"No fields to update for {resource.label} {resource_id}")
        return ServiceResult.success(existing)

    uow = UnitOfWork(f"update_{resource.table}")
    uow.update(resource.table, resource_id, update_data)

    try:
        await db.commit(uow)
    except RowNotFoundError:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"{resource.label} {resource_id} not found")
    except PersistenceError as e:
        logger.error(f"Failed to update {resource.label} {resource_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, f"Failed to update {resource.label.lower()}")

    logger.info(
        f"{resource.label} {resource_id} updated for user {user_id}: "
        f"fields={list(update_data.keys())}"
    )
    return ServiceResult.success({**existing, **update_data})


async def delete_resource(
    db: Database,
    resource: Resource,
    user_id: str,
    resource_id: str,
) -> ServiceResult[Dict[str, Any]]:
    """
    Delete a record.

    Returns:
        ServiceResult with the deleted record, NOT_FOUND or PERSISTENCE
    """
    existing = await get_resource(db, resource, user_id, resource_id)
    if not existing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"{resource.label} {resource_id} not found")

    uow = UnitOfWork(f"delete_{resource.table}")
    uow.delete(resource.table, resource_id)

    try:
        await db.commit(uow)
    except RowNotFoundError:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"{resource.label} {resource_id} not found")
    except PersistenceError as e:
        logger.error(f"Failed to delete {resource.label} {resource_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, f"Failed to delete {resource.label.lower()}")

    logger.info(f"{resource.label} {resource_id} deleted for user {user_id}")
    return ServiceResult.success(existing)
