import re
from lora.exceptions import ValidationException

class InputValidator:
    """Rejects inputs that must never reach the pipeline."""

    MAX_CLAIM_LENGTH = 5000
    
    XSS_PATTERNS = [
        re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
        re.compile(r"javascript:", re.IGNORECASE),
        re.compile(r"<\w+[^>]*\son\w+\s*=", re.IGNORECASE),
        re.compile(r"<iframe", re.IGNORECASE),
    ]
    
    CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
    
    @staticmethod
    def sanitize_claim(claim) -> str:
        if not isinstance(claim, str):
            raise ValidationException("text", "Claim must be a string")

        if InputValidator.CONTROL_CHARS_PATTERN.search(claim):
            raise ValidationException("text", "Claim contains control characters")

        claim = claim.strip()

        if not claim:
            raise ValidationException("text", "Claim cannot be empty")
        
        if len(claim) > InputValidator.MAX_CLAIM_LENGTH:
            raise ValidationException(
                "text", f"Claim cannot exceed {InputValidator.MAX_CLAIM_LENGTH} characters"
            )
        
        for pattern in InputValidator.XSS_PATTERNS:
            if pattern.search(claim):
                raise ValidationException("text", "Claim contains suspicious HTML/JavaScript patterns")
        
        return claim
