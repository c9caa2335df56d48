"""Provider factory with automatic provider discovery."""

import importlib
import inspect
import logging
import pkgutil
from pathlib import Path
from typing import Dict, List, Type, Union

from .base import Provider, ProviderAdapter, ProviderMetadata

logger = logging.getLogger(__name__)


class ProviderFactory:
    """
    Factory for creating provider adapter instances with automatic discovery.

    This factory discovers all provider classes in the providers directory
    that inherit from ProviderAdapter and have METADATA defined.
    """

    _provider_registry: Dict[str, Type[ProviderAdapter]] = {}
    _discovered = False

    @classmethod
    def _discover_providers(cls):
        """
        Discover all provider classes in the providers directory.

        Registers classes that:
        1. Inherit from ProviderAdapter
        2. Are not the base ProviderAdapter class itself
        3. Have a METADATA attribute naming a known Provider
        """
        if cls._discovered:
            return

        providers_dir = Path(__file__).parent

        for module_info in pkgutil.iter_modules([str(providers_dir)]):
            module_name = module_info.name

            if module_name in ("base", "factory", "__init__"):
                continue

            try:
                module = importlib.import_module(
                    f"german_study_cli.providers.{module_name}"
                )
            except ImportError as e:
                logger.warning("Failed to load provider from %s: %s", module_name, e)
                continue

            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(obj, ProviderAdapter)
                    and obj is not ProviderAdapter
                    and not inspect.isabstract(obj)
                    and obj.METADATA is not None
                ):
                    provider_name = obj.METADATA.name.lower()
                    if provider_name not in {p.value for p in Provider}:
                        logger.warning(
                            "Ignoring provider %s: not a supported provider", provider_name
                        )
                        continue
                    cls._provider_registry[provider_name] = obj

        cls._discovered = True

    @classmethod
    def create_provider(cls, provider: Union[Provider, str]) -> ProviderAdapter:
        """
        Create a provider adapter.

        Args:
            provider: Provider or its name

        Returns:
            ProviderAdapter instance

        Raises:
            ValueError: If provider is unknown
        """
        cls._discover_providers()

        provider_name = str(provider).lower()

        if provider_name not in cls._provider_registry:
            available = ", ".join(sorted(cls._provider_registry))
            raise ValueError(
                f"Unknown provider: {provider_name}. "
                f"Available providers: {available}"
            )

        return cls._provider_registry[provider_name]()

    @classmethod
    def list_available_providers(cls) -> List[ProviderMetadata]:
        """
        Get list of available providers with their metadata.

        Returns:
            List of ProviderMetadata objects in Provider order
        """
        cls._discover_providers()

        return [
            cls._provider_registry[p.value].METADATA
            for p in Provider
            if p.value in cls._provider_registry
        ]

    @classmethod
    def get_provider_metadata(cls, provider_name: Union[Provider, str]) -> ProviderMetadata:
        """
        Get metadata for a specific provider.

        Args:
            provider_name: Name of the provider

        Returns:
            ProviderMetadata object

        Raises:
            ValueError: If provider not found
        """
        cls._discover_providers()

        provider_name = str(provider_name).lower()
        if provider_name not in cls._provider_registry:
            raise ValueError(f"Provider not found: {provider_name}")

        return cls._provider_registry[provider_name].METADATA
