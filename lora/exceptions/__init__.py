from typing import Optional, Dict, Any

class LoraException(Exception):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }

class APIException(LoraException):
    pass

class VerifierException(APIException):
    def __init__(self, verifier: str, reason: str, recoverable: bool = True):
        super().__init__(
            f"Verifier {verifier} failed: {reason}",
            {"verifier": verifier, "reason": reason, "recoverable": recoverable}
        )

class EmbeddingException(APIException):
    def __init__(self, reason: str):
        super().__init__(f"Embedding service error: {reason}", {"reason": reason})

class SearchException(APIException):
    def __init__(self, provider: str, reason: str):
        super().__init__(
            f"Search provider {provider} failed: {reason}",
            {"provider": provider, "reason": reason}
        )

class RateLimitException(APIException):
    def __init__(self, api_name: str, retry_after: float):
        super().__init__(
            f"Rate limit exceeded for {api_name}",
            {"api_name": api_name, "retry_after": retry_after}
        )

class CircuitBreakerOpenException(APIException):
    def __init__(self, service_name: str, failure_count: int):
        super().__init__(
            f"Circuit breaker open for {service_name}",
            {"service": service_name, "failure_count": failure_count}
        )

class ValidationException(LoraException):
    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Validation failed for {field}: {reason}",
            {"field": field, "reason": reason}
        )

class CacheException(LoraException):
    def __init__(self, cache_type: str, reason: str):
        super().__init__(
            f"Unusable {cache_type} cache entry: {reason}",
            {"cache_type": cache_type, "reason": reason}
        )
