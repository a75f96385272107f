"""
Mixins for common functionality.
"""

from __future__ import annotations

from typing import Any


class Configurable:
    """
    Mixin class for handling configuration overrides.

    Classes using this mixin can call apply_overrides to set attributes from an
    override dict, falling back to the uppercase attribute of a config object.
    """

    # Attributes whose config name is not simply attr.upper()
    CONFIG_ALIASES: dict[str, str] = {
        "full_grace_days": "OFFLINE_GRACE_FULL_DAYS",
        "limited_grace_days": "OFFLINE_GRACE_LIMITED_DAYS",
        "max_free_objects": "LIMITED_MODE_MAX_OBJECTS",
    }

    def apply_overrides(
        self,
        overrides: dict[str, Any],
        config_obj: Any,
        attr_list: list[str] | None = None,
    ) -> None:
        """
        Apply overrides to the instance using the config object as defaults.

        Sets self.attr = overrides[attr] when given and not None, otherwise
        config_obj.ATTR, for each attr in attr_list.

        Args:
            overrides: Dictionary of override values
            config_obj: Configuration object with uppercase attribute names
            attr_list: List of attribute names to set
        """
        if attr_list is None:
            attr_list = []

        for attr in attr_list:
            config_attr = self.CONFIG_ALIASES.get(attr, attr.upper())
            override = overrides.get(attr)
            if override is not None:
                setattr(self, attr, override)
            elif hasattr(config_obj, config_attr):
                setattr(self, attr, getattr(config_obj, config_attr))
