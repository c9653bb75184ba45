"""
Provider factory for creating LLM provider instances.

Usage:
    from autocommit.providers.factory import get_provider

    # Provider inferred from config.model
    provider = get_provider(config)

    # Explicit provider selection
    provider = get_provider(config, provider_type=ProviderType.OPENAI)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from autocommit.providers import (
    PROVIDER_REGISTRY,
    LLMProvider,
    ProviderError,
    ProviderType,
    infer_provider_type,
)

if TYPE_CHECKING:
    from autocommit.core.config import AppConfig


def _ensure_providers_registered() -> None:
    """Import provider modules so their @register_provider decorators run."""
    if not PROVIDER_REGISTRY:
        from autocommit.providers import anthropic, openai  # noqa: F401


def get_provider(
    config: AppConfig,
    *,
    model_id: str | None = None,
    provider_type: ProviderType | None = None,
) -> LLMProvider:
    """Get an LLM provider instance.

    The provider type is taken from *provider_type* when given, otherwise
    inferred from *model_id* or the configured model.

    Raises:
        ModelNotFoundError: If provider cannot be determined
        ConfigurationError: If the provider's API key is not set
        ProviderError: If no implementation is registered
    """
    ptype = provider_type or infer_provider_type(model_id or config.model)

    # Fail before any git side effects when the key is missing.
    config.api_key_for(ptype.name.lower())

    _ensure_providers_registered()
    factory = PROVIDER_REGISTRY.get(ptype)
    if factory is None:
        raise ProviderError(f"Unknown provider type: {ptype}")
    return factory(config)


__all__ = [
    "get_provider",
]
