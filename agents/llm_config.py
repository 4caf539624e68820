"""LLM provider/config and model construction for stand-in players."""

import os
from typing import Any

# Type alias for model passed to Agent.run_sync(); pydantic-ai accepts Model | str | None
ModelT = Any

ENV_OPENAI_API_KEY = "OPENAI_API_KEY"
ENV_ANTHROPIC_API_KEY = "ANTHROPIC_API_KEY"
ENV_OLLAMA_BASE_URL = "OLLAMA_BASE_URL"

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
    "ollama": "llama3.2",
}
SUPPORTED_PROVIDERS = tuple(DEFAULT_MODELS)


def get_model_from_config(
    provider: str,
    model_name: str | None = None,
    api_key: str | None = None,
) -> ModelT:
    """
    Build a pydantic-ai Model for the given provider. Without api_key the
    provider's usual environment variable is used.
    """
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"provider must be one of {SUPPORTED_PROVIDERS}, got {provider!r}")
    model_name = model_name or DEFAULT_MODELS[provider]

    if provider == "anthropic":
        from pydantic_ai.models.anthropic import AnthropicModel
        from pydantic_ai.providers.anthropic import AnthropicProvider

        key = api_key or os.environ.get(ENV_ANTHROPIC_API_KEY)
        return AnthropicModel(
            model_name,
            provider=AnthropicProvider(api_key=key) if key else AnthropicProvider(),
        )

    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if provider == "ollama":
        # Local Ollama speaks the OpenAI protocol and needs no real key
        base_url = os.environ.get(ENV_OLLAMA_BASE_URL, "http://localhost:11434/v1")
        return OpenAIChatModel(
            model_name,
            provider=OpenAIProvider(base_url=base_url, api_key=api_key or "ollama"),
        )
    key = api_key or os.environ.get(ENV_OPENAI_API_KEY)
    return OpenAIChatModel(
        model_name,
        provider=OpenAIProvider(api_key=key) if key else OpenAIProvider(),
    )


def get_model(llm_config: dict[str, Any] | None) -> ModelT | None:
    """Model for an llm_config dict, or None when stand-ins should use default choices."""
    if not llm_config or not llm_config.get("provider"):
        return None
    return get_model_from_config(
        llm_config["provider"],
        llm_config.get("model"),
        llm_config.get("api_key"),
    )
