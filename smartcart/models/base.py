"""Base models shared by persisted records and API schemas"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; either is accepted on input"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RecordModel(CamelModel):
    """
    Base class for records kept in the store.
    
    Provides:
    - the camelCase on-disk layout
    - ``to_document`` for snapshot serialization
    """
    
    def to_document(self) -> dict:
        """JSON-ready dict in the on-disk layout; UTC datetimes render with a ``Z`` suffix"""
        return self.model_dump(mode="json", by_alias=True)
