from datetime import datetime, timezone
from typing import Annotated, ClassVar, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # naive values (SQLite, clients without offsets) are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Base for entities returned by storage and serialized as camelCase JSON"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class InputModel(CamelModel):
    """Base for request bodies: unknown fields are rejected"""

    model_config = ConfigDict(extra="forbid")


class UpdateModel(InputModel):
    """
    Partial update body. Only fields the client actually sent are applied;
    fields listed in ``not_nullable`` may be omitted but not sent as null.
    """

    not_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.model_fields_set:
            if name in self.not_nullable and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class MessageResponse(BaseModel):
    message: str
