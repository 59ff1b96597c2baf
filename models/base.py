"""
Base schemas and mixins for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for API schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class OpenRowSchema(BaseModel):
    """
    Base for imported row schemas.

    Rows are "open": keys the schema does not declare (provenance such as
    upload_id, user_id, tenant_id) survive validation unchanged.
    """
    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
    )

