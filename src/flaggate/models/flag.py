"""
Flag definition models

Read-only inputs supplied by the caller. Field names follow the stored
camelCase wire shape; snake_case names are accepted as well.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class ConditionType(str, Enum):
    """Known condition types"""
    STRING = "string"
    DATETIME = "datetime"
    NUMBER = "number"
    BOOLEAN = "boolean"


class MatchingPolicy(str, Enum):
    """Segment matching policy; anything other than ALL behaves as ANY"""
    ANY = "any"
    ALL = "all"


_DEFINITION_CONFIG = ConfigDict(
    extra="ignore",
    frozen=True,
    populate_by_name=True,
    coerce_numbers_to_str=True,
)


class Condition(BaseModel):
    """A single typed comparison against one context attribute"""

    model_config = _DEFINITION_CONFIG

    # Free text and optional: unknown or missing types and operators resolve
    # to non-match for this condition only
    key: Optional[str] = Field(default=None, description="Condition identifier")
    context: Optional[str] = Field(default=None, description="Name of the context attribute to read")
    condition_type: Optional[str] = Field(default=None, alias="conditionType", description="string | datetime | number | boolean")
    operator: Optional[str] = Field(default=None, description="Operator, meaning depends on condition_type")
    value: Optional[str] = Field(default="", description="Operand, always stored as text")
    debug: Optional[bool] = Field(default=False, description="Trace this condition when evaluated")


class Segment(BaseModel):
    """Named group of conditions with a matching policy"""

    model_config = _DEFINITION_CONFIG

    key: Optional[str] = Field(default=None, description="Segment identifier")
    matching: Optional[str] = Field(default=None, description="any | all (absent means any)")
    conditions: Optional[List[Condition]] = Field(default=None, description="Ordered conditions")

    @property
    def requires_all(self) -> bool:
        return self.matching == MatchingPolicy.ALL.value


class Rule(BaseModel):
    """Entry in a flag's rule list"""

    model_config = _DEFINITION_CONFIG

    segment: Optional[Segment] = None


class Flag(BaseModel):
    """Feature flag: master status plus an optional ordered rule list"""

    model_config = _DEFINITION_CONFIG

    key: Optional[str] = Field(default=None, description="Flag key, used for logging only")
    name: Optional[str] = Field(default=None, description="Flag name, used for logging only")
    status: bool = Field(description="Master on/off switch")
    rules: Optional[List[Rule]] = Field(default=None, description="Ordered rule list")

    @property
    def label(self) -> str:
        return self.key or self.name or "<unnamed>"
