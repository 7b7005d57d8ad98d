"""Configuration classes for XML tree building and fingerprinting.

Component configurations are plain dataclasses validated in ``__post_init__``;
:class:`ComparatorConfig` bundles them into an immutable, JSON-serializable
whole that can be shared between threads.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

_COMPONENTS = ("tree", "global_")

# Input cap used by the untrusted_input preset (16 MiB)
_UNTRUSTED_INPUT_LIMIT = 16 * 1024 * 1024


@dataclass
class TreeConfig:
    """Configuration for building Node trees from XML text."""

    # Parser settings handed to lxml; "internal" expands only entities
    # declared in the document itself
    resolve_entities: Union[bool, str] = "internal"
    huge_tree: bool = False

    # Node population settings
    eager_fingerprints: bool = True
    capture_raw_content: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not (isinstance(self.resolve_entities, bool) or self.resolve_entities == "internal"):
            raise ValueError("resolve_entities must be a bool or 'internal'")
        for name in (
            "huge_tree",
            "eager_fingerprints",
            "capture_raw_content",
        ):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a bool")


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    enable_correlation_tracking: bool = True
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ComparatorConfig:
    """Immutable configuration for tree building and fingerprinting.

    Thread-safe due to frozen dataclass implementation; derive variants with
    :meth:`override` instead of mutating.
    """

    tree: TreeConfig = field(default_factory=TreeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        for component in _COMPONENTS:
            try:
                getattr(self, component).__post_init__()
            except ValueError as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        if (
            not self.tree.resolve_entities
            and self.tree.huge_tree
            and self.global_.max_input_size_bytes is None
        ):
            raise ConfigValidationError(
                "huge_tree without an input size limit defeats untrusted input handling",
                field_name="global_",
                suggestions=[
                    "Set global_.max_input_size_bytes",
                    "Disable tree.huge_tree",
                ],
            )

    def override(self, **kwargs: Any) -> "ComparatorConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use
                ``component__field`` notation

        Returns:
            New ComparatorConfig instance with overrides applied

        Example:
            >>> config = ComparatorConfig()
            >>> config.override(tree__eager_fingerprints=False).tree.eager_fingerprints
            False
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            # global_ ends in an underscore, so split on the known prefixes
            component = next(
                (name for name in _COMPONENTS if key.startswith(name + "__")), None
            )
            if component is not None:
                field_name = key[len(component) + 2:]
                nested_overrides.setdefault(component, {})[field_name] = value
            elif "__" in key:
                raise ConfigValidationError(
                    f"Unknown configuration component: {key.split('__', 1)[0]}",
                    field_name=key,
                    suggestions=list(_COMPONENTS),
                )
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, values in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComparatorConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files surface
        instead of silently falling back to defaults.
        """
        component_types = {"tree": TreeConfig, "global_": GlobalConfig}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                try:
                    values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in cls.__dataclass_fields__:
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ComparatorConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ComparatorConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def untrusted_input(cls) -> "ComparatorConfig":
        """Create configuration preset for documents from untrusted sources."""
        return cls(
            tree=TreeConfig(resolve_entities=False, huge_tree=False),
            global_=GlobalConfig(max_input_size_bytes=_UNTRUSTED_INPUT_LIMIT),
            name="untrusted_input",
            description=(
                "Entity expansion disabled and input size capped for documents "
                "from untrusted sources"
            ),
        )
