from .providers import (
    GeminiProvider,
    LLMProvider,
    ModelsExhaustedError,
    ProviderError,
    is_credential_error,
    is_soft_model_error,
)
from .model_chain import generate_with_fallback, try_models
from .composer import ResponseComposer

__all__ = [
    "GeminiProvider",
    "LLMProvider",
    "ModelsExhaustedError",
    "ProviderError",
    "ResponseComposer",
    "generate_with_fallback",
    "is_credential_error",
    "is_soft_model_error",
    "try_models",
]
