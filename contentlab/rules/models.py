from pydantic import BaseModel, Field, field_validator, model_validator

from contentlab.domain.entities import CONTENT_TYPES


class RangeRule(BaseModel):
    min: int = Field(ge=0)
    max: int

    @model_validator(mode="after")
    def _ordered(self) -> "RangeRule":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class ContentRules(BaseModel):
    title: RangeRule
    type_values: list[str] = Field(min_length=1)
    max_tags: int = Field(default=30, ge=0)

    @field_validator("type_values")
    @classmethod
    def _storable_types(cls, values: list[str]) -> list[str]:
        # Rules can narrow the content types the store accepts, never widen them.
        unknown = sorted(set(values) - set(CONTENT_TYPES))
        if unknown:
            raise ValueError(f"Unsupported content types: {', '.join(unknown)}")
        return values


class SchedulingRules(BaseModel):
    # A schedule for a past instant is accepted and picked up by the next run.
    allow_past_schedule: bool = True
    publisher_batch_limit: int = Field(default=100, gt=0)
    poll_interval_seconds: float = Field(default=60.0, gt=0)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    content: ContentRules
    scheduling: SchedulingRules = Field(default_factory=SchedulingRules)
    ops: OpsRules = Field(default_factory=OpsRules)
