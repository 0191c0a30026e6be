"""
Color model registration system.

Provides a global registry mapping canonical color-space names to model
descriptors, so adding a model means registering one descriptor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from color_channels.color.models import ColorModel


class ColorModelRegistry:
    """
    Global registry of available color models.

    Models are registered by their canonical lowercase name.

    Usage:
        # Register a model descriptor
        ColorModelRegistry.register(ColorModel(name="rgb", ...))

        # Look up a model
        model = ColorModelRegistry.get("rgb")
    """

    _registry: dict[str, ColorModel] = {}

    @classmethod
    def register(cls, model: ColorModel) -> ColorModel:
        """
        Register a model descriptor.

        Args:
            model: The descriptor to register

        Returns:
            The registered descriptor
        """
        # Re-registration replaces the previous descriptor
        cls._registry[model.name] = model
        return model

    @classmethod
    def unregister(cls, model_or_name: ColorModel | str) -> bool:
        """
        Unregister a model.

        Args:
            model_or_name: Descriptor or canonical name to unregister

        Returns:
            True if unregistered, False if not found
        """
        name = model_or_name if isinstance(model_or_name, str) else model_or_name.name
        if name not in cls._registry:
            return False
        del cls._registry[name]
        return True

    @classmethod
    def get(cls, name: str) -> ColorModel | None:
        """
        Get a model by canonical name.

        Returns:
            The descriptor or None if not found
        """
        return cls._registry.get(name)

    @classmethod
    def get_registry(cls) -> dict[str, ColorModel]:
        """Get a copy of the full registry dictionary."""
        return cls._registry.copy()

    @classmethod
    def list_all(cls) -> list[str]:
        """List all registered model names, sorted."""
        return sorted(cls._registry)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations (useful for testing)."""
        cls._registry.clear()


def register_model(model: ColorModel) -> ColorModel:
    """Add a descriptor to the global registry."""
    return ColorModelRegistry.register(model)


def get_registry() -> type[ColorModelRegistry]:
    """
    Get the global model registry.

    Returns:
        The ColorModelRegistry class (which has class methods for all operations)
    """
    return ColorModelRegistry
