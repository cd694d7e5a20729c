"""
Pydantic schemas for API request and response validation.

Every endpoint declares explicit request and response models. Money is
`Decimal` on the way in and serialized as a decimal string on the way out.
"""
