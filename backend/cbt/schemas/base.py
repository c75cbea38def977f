from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for API schemas.

    The web client speaks camelCase JSON (``isActive``, ``numQuestions``);
    Python code uses snake_case. Either spelling is accepted on input and
    responses are rendered with the camelCase aliases.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class BulkUpdateResponse(CamelModel):
    """Result of an operation touching many rows at once"""
    success: bool = True
    updated: int
    message: str
