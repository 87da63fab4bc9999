from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field, field_validator

from lora.exceptions import ValidationException
from lora.utils.fingerprint import normalize_text, fingerprint
from lora.utils.validation import InputValidator


@dataclass(frozen=True)
class Claim:
    """Raw claim text and the identifiers derived from it for one request."""
    text: str
    normalized: str
    fingerprint: str

    @classmethod
    def from_text(cls, text: str) -> "Claim":
        normalized = normalize_text(text)
        return cls(text=text, normalized=normalized, fingerprint=fingerprint(normalized))


@dataclass(frozen=True)
class PersonalCheck:
    is_personal: bool
    reason: str
    confidence: int


class CheckRequest(BaseModel):
    """Request body for /api/check with validation."""
    model_config = ConfigDict(
        json_schema_extra={"example": {"text": "The Great Wall of China is visible from space"}}
    )

    text: str = Field(..., max_length=InputValidator.MAX_CLAIM_LENGTH)
    
    @field_validator('text')
    @classmethod
    def sanitize_text(cls, v):
        try:
            return InputValidator.sanitize_claim(v)
        except ValidationException as e:
            raise ValueError(e.details["reason"])
