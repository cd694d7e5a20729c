"""
FastAPI routers for all API endpoints.

Each module defines a router for one domain (accounts, bank transactions,
invoices, ...). Protected routes depend on get_authenticated_user and
get_database; services return ServiceResult values which the routes
convert to HTTP errors with unwrap_or_raise.
"""
