"""Base schema configuration for all Pydantic models.

- APIRequest / APIResponse: bodies exchanged with API callers
- DownstreamRequest / DownstreamResponse: payloads exchanged with the
  extraction provider

All of them serialize with camelCase aliases and accept snake_case input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Private base schema with common configuration."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Incoming request bodies; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class APIResponse(_BaseSchema):
    """Outgoing response bodies; only declared fields are allowed."""

    model_config = ConfigDict(extra="forbid")


class DownstreamRequest(_BaseSchema):
    """Requests sent to external services; only declared fields are sent."""

    model_config = ConfigDict(extra="forbid")


class DownstreamResponse(_BaseSchema):
    """Responses from external services; new upstream fields are ignored."""

    model_config = ConfigDict(extra="ignore")
