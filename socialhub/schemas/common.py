from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentModel(CamelModel):
    """Response model built from a stored document: `_id` becomes `id`."""

    id: int = Field(validation_alias=AliasChoices("_id", "id"))


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str((Decimal(int(value)) / 100).quantize(Decimal("0.01")))
