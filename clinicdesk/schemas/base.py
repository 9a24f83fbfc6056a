"""Shared pydantic building blocks for stored entities."""

from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Optional
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from clinicdesk.utils.time import ensure_utc, format_datetime


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ISO-8601 UTC timestamp, serialized like ``2024-03-01T09:30:00.000Z``
Timestamp = Annotated[
    datetime,
    AfterValidator(ensure_utc),
    PlainSerializer(format_datetime, return_type=str, when_used="json"),
]

# Optional calendar date; forms submit "" for an empty date input
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]

def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


# Non-empty text; whitespace-only counts as missing but is never stripped
RequiredText = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


def new_id() -> str:
    """Generate an identifier for owned items and non-patient entities."""
    return str(uuid4())


class CamelModel(BaseModel):
    """Base model persisted and exchanged with camelCase keys.

    Subclasses declare the messages the validator reports, keyed by the
    dotted camelCase field path with list indexes removed:

    - ``required_messages``: value missing, null or empty
    - ``invalid_messages``: value present but malformed
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    required_messages: ClassVar[dict[str, str]] = {}
    invalid_messages: ClassVar[dict[str, str]] = {}

    def to_document(self) -> dict[str, Any]:
        """Serialize for the document store (camelCase, absent optionals omitted)."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
