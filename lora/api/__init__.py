from .base import BaseVerifier, parse_verdict, post_json
from .openai import OpenAIVerifier
from .anthropic import AnthropicVerifier
from .gemini import GeminiVerifier
from .perplexity import PerplexityVerifier
from .embeddings import GeminiEmbeddingProvider
from .search import SearchProvider, PerplexitySearch, GoogleSearch, BingSearch

__all__ = [
    "BaseVerifier",
    "parse_verdict",
    "post_json",
    "OpenAIVerifier",
    "AnthropicVerifier",
    "GeminiVerifier",
    "PerplexityVerifier",
    "GeminiEmbeddingProvider",
    "SearchProvider",
    "PerplexitySearch",
    "GoogleSearch",
    "BingSearch",
]
