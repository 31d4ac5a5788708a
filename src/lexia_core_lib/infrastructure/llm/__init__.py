"""LLM infrastructure: provider variants and the adapter that fronts them."""

from .adapter import ProviderAdapter
from .providers import ProviderRegistry

__all__ = ["ProviderAdapter", "ProviderRegistry"]
