import math

from pydantic import BaseModel, ConfigDict, field_validator


class DietProfile(BaseModel):
    """What the engine knows about a user. Every field is optional."""

    weight_kg: float | None = None
    height_cm: float | None = None
    age: float | None = None
    goal: str | None = None        # free text, matched by substring ("lose_weight", "gain muscle"…)
    diet_type: str | None = None   # veg / non_veg / vegan / keto / no_preference
    allergies: str | None = None   # comma separated, e.g. "paneer, egg"

    # prompt-only context
    name: str | None = None
    occupation: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("weight_kg", "height_cm", "age")
    @classmethod
    def zero_means_missing(cls, v):
        # 0, negatives and nan count as "not given"
        if v is not None and (not math.isfinite(v) or v <= 0):
            return None
        return v

    @property
    def has_body_stats(self) -> bool:
        return bool(self.weight_kg and self.height_cm and self.age)
