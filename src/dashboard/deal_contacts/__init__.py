"""Deal contact records -- closed-deal/client entries owned by administrators.

Provides the SQLAlchemy model, Pydantic create/patch/read schemas with
field and date-range validation, and DealContactRepository for async CRUD.
"""
