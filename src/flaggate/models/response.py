"""
Evaluation response models
"""

import hashlib
import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict


class ReasonCode(str, Enum):
    """Closed set of diagnostic codes explaining an evaluation outcome"""
    RULE_NOT_FOUND = "RuleNotFound"
    FLAG_DISABLED = "FlagDisabled"
    FLAG_MATCH = "FlagMatch"
    NO_MATCHING_CONDITION = "NoMatchingCondition"
    CONDITION_NOT_FOUND = "ConditionNotFound"
    GENERIC_ERROR = "GenericError"


class EvaluateMeta(BaseModel):
    """Segment and condition keys that produced the outcome"""

    model_config = ConfigDict(extra="forbid", frozen=True)

    segment: Optional[str] = Field(default=None, description="Matched or attempted segment key")
    condition: Optional[Union[str, List[Optional[str]]]] = Field(
        default=None,
        description="Matched condition key, or every key of the segment when none matched singly"
    )


class EvaluateResponse(BaseModel):
    """Result of evaluating one flag against one context"""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    match: bool = Field(default=False, description="Whether the flag is on for this context")
    meta: EvaluateMeta = Field(default_factory=EvaluateMeta)
    reason: ReasonCode = Field(description="Diagnostic code")
    time: float = Field(ge=0.0, description="Elapsed milliseconds")
    correlation_id: Optional[str] = Field(default=None, alias="correlationId", description="Echoed caller id")
    response_id: str = Field(alias="responseId", description="ULID generated for this response")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with camelCase keys"""
        return self.model_dump(by_alias=True, mode="json")

    def outcome_hash(self) -> str:
        """SHA-256 over match, meta and reason only; timing and ids are excluded"""
        outcome = {
            "match": self.match,
            "meta": self.meta.model_dump(mode="json"),
            "reason": self.reason.value,
        }
        encoded = json.dumps(outcome, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
        return hashlib.sha256(encoded.encode('utf-8')).hexdigest()
