import logging
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.engine.row import Row

logger = logging.getLogger(__name__)

# camelCase on the wire, snake_case in python; both accepted on input
CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestModel(BaseModel):
    """Base model for request bodies - input validation"""

    model_config = CAMEL_CONFIG


class CustomBaseModel(BaseModel):
    """Custom base model for response schemas.
    - pre-process the data before init
    - set the default value if a simple-typed value cannot be converted
    - helper to build from a query row or dict
    """

    model_config = CAMEL_CONFIG

    def __init__(self, **data: Any) -> None:
        for attr, value in data.items():
            field = type(self).model_fields.get(attr)
            if field is None:
                continue
            attr_type = field.annotation

            # process simple type
            if attr_type in (int, float, str, bool) and not isinstance(value, attr_type):
                try:  # try to convert the value to the type of the attribute
                    data[attr] = attr_type(value)
                except Exception:
                    logger.warning("Invalid value for key %s, using default", attr)
                    data[attr] = field.default if field.default is not None else attr_type()
        super().__init__(**data)

    @classmethod
    def from_record(cls, record: Row[Any] | dict[str, Any] | Any):
        if isinstance(record, Row):
            return cls(**record._asdict())
        elif isinstance(record, dict):
            return cls(**record)
        elif hasattr(record, "__table__"):
            return cls.model_validate(record)
        else:
            raise ValueError(f"Invalid record type: {type(record)}")


class Message(CustomBaseModel):
    message: str = ""


class Pagination(CustomBaseModel):
    page: int = 1
    limit: int = 20
    total: int = 0
    pages: int = 0

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(page=page, limit=limit, total=total, pages=pages)
