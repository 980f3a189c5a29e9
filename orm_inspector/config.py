import yaml
import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional, Dict, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from orm_inspector.constants import DefaultConfig, OUTPUT_FORMATS
from orm_inspector.domain.models import QualifiedName
from orm_inspector.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


# --- Pydantic Models for Configuration Schema ---


class DatabaseSettings(BaseModel):
    """Schema for a single database connection within the DATABASES dict."""

    model_config = ConfigDict(extra="allow")

    ENGINE: str = Field(
        ...,
        min_length=1,
        description="Django database engine (e.g., 'django.db.backends.postgresql').",
    )
    NAME: str = Field(..., min_length=1, description="Database name.")
    USER: Optional[str] = Field(None, description="Database user.")
    PASSWORD: Optional[str] = Field(None, description="Database password.")
    HOST: Optional[str] = Field(None, description="Database host address.")
    PORT: Optional[Union[str, int]] = Field(None, description="Database port number.")
    OPTIONS: Optional[Dict[str, Any]] = Field(
        {}, description="Database engine specific options."
    )

    @field_validator("PORT", mode="before")
    @classmethod
    def validate_port(cls, v):
        """Ensure port is a number or string representation of one, and within range."""
        if v is None or v == "":
            return None
        if isinstance(v, int):
            port_num = v
        elif isinstance(v, str) and v.isdigit():
            port_num = int(v)
        else:
            raise ValueError(
                f"Port must be an integer or string containing only digits, got {type(v).__name__}"
            )

        if not 0 <= port_num <= 65535:
            raise ValueError(f"Port must be between 0 and 65535, got {port_num}")
        return port_num


class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    databases: Dict[str, DatabaseSettings] = Field(
        ..., description="Django DATABASES setting dictionary."
    )
    schema_name: Optional[str] = Field(
        None,
        alias="schema",
        description="Schema to reverse-engineer; the connection's current schema when unset.",
    )
    include_tables: Optional[List[str]] = Field(
        None, description="Tables to map, as 'table' or 'schema.table'. All tables when unset."
    )
    exclude_tables: Optional[List[str]] = Field(
        None, description="Tables never mapped; references to them stay plain columns."
    )
    exclude_schemas: Optional[List[str]] = Field(
        None, description="Schemas whose tables are never mapped."
    )
    naming_style: Literal["default", "verbatim"] = Field(
        DefaultConfig.NAMING_STYLE,
        description="Reverse naming style deriving record and field names.",
    )
    baseline_style: Literal["default", "persistent", "snake_case"] = Field(
        DefaultConfig.BASELINE_STYLE,
        description="Naming convention whose defaults are removed from the mapping.",
    )
    minimize: bool = Field(
        DefaultConfig.MINIMIZE, description="Remove mapping values implied by the baseline style."
    )
    type_mapping: Literal["default", "sqlite"] = Field(
        DefaultConfig.TYPE_MAPPING, description="Column to Python type mapping."
    )
    native_int_width: Literal[32, 64] = Field(
        DefaultConfig.NATIVE_INT_WIDTH, description="Width of the native int of the target platform."
    )
    generate_unique_key_phantoms: bool = Field(
        DefaultConfig.GENERATE_UNIQUE_KEY_PHANTOMS,
        description="Declare phantom types for uniques used as keys.",
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Directory for the generated declarations and mapping document.",
    )
    output_format: Literal["json", "yaml"] = Field(
        DefaultConfig.OUTPUT_FORMAT, description=f"Mapping document format, one of {OUTPUT_FORMATS}."
    )

    # Internal field, usually added by load_config
    SECRET_KEY: Optional[str] = Field(
        None, description="Internal secret key for Django setup."
    )

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    # --- Custom Validators ---

    @field_validator("include_tables", "exclude_tables", "exclude_schemas", mode="before")
    @classmethod
    def check_names_are_strings(cls, v):
        """Ensure names in lists are non-empty strings."""
        if v is None:
            return None
        if not isinstance(v, list):
            raise ValueError("include_tables, exclude_tables and exclude_schemas must be lists.")
        for item in v:
            if not isinstance(item, str):
                raise ValueError(
                    f"Names in include/exclude lists must be strings, found: {type(item).__name__}"
                )
            if not item.strip():
                raise ValueError(
                    "Names in include/exclude lists cannot be empty or just whitespace."
                )
        return [item.strip() for item in v]

    @model_validator(mode="after")
    def check_default_database_exists(self):
        """Ensure the 'databases' dictionary contains a 'default' key."""
        if "default" not in self.databases:
            raise ValueError(
                "The 'databases' configuration must contain a 'default' key specifying the database to introspect."
            )
        return self

    def include_predicate(self):
        """
        Build the filter deciding which tables are mapped.

        A name in the include/exclude lists matches either the bare table
        name or ``schema.table``.
        """
        include = set(self.include_tables) if self.include_tables else None
        exclude = set(self.exclude_tables or [])
        exclude_schemas = set(self.exclude_schemas or [])

        def matches(names: set, name: QualifiedName) -> bool:
            return name.table in names or str(name) in names

        def predicate(name: QualifiedName) -> bool:
            if name.schema is not None and name.schema in exclude_schemas:
                return False
            if matches(exclude, name):
                return False
            return include is None or matches(include, name)

        return predicate


# --- Validation Function (Internal) ---
def _validate_and_parse_config(config_dict: Dict[str, Any], config_path: Optional[str] = None) -> ToolConfigSchema:
    """Validate a raw configuration dictionary against the Pydantic schema."""
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully.")
        return validated_config
    except ValidationError as e:
        problems = []
        for error in e.errors():
            # Format location path (e.g., databases -> default -> PORT)
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Top Level"
            problems.append(f"{loc_str}: {error.get('msg', 'Unknown error')}")

        raise ConfigurationError(
            "Configuration validation failed",
            config_file=config_path,
            context={'errors': problems},
        ) from e


def _read_yaml(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigurationError(f"Config file not found at {config_path}", config_file=config_path)
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file {config_path}: {e}", config_file=config_path) from e

    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            f"Content in config file {config_path} is not a dictionary",
            config_file=config_path,
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return yaml_config


# --- Main Configuration Loading Function ---


def load_config(
    config_path: Optional[str], cli_args: Optional[argparse.Namespace] = None
) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.

    Raises:
        ConfigurationError: If the file cannot be read or the result is invalid
    """
    raw_config: Dict[str, Any] = _read_yaml(config_path) if config_path else {}

    # Override with CLI arguments (only those explicitly provided)
    cli_dict = vars(cli_args) if cli_args is not None else {}
    overridden_keys = set()
    for key, value in cli_dict.items():
        if value is not None and key != "databases" and key in ToolConfigSchema.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {overridden_keys}")

    # Add internal SECRET_KEY if not present (needed for django.setup)
    if "SECRET_KEY" not in raw_config:
        raw_config["SECRET_KEY"] = os.urandom(50).hex()

    logger.info("Validating final configuration...")
    validated_config = _validate_and_parse_config(raw_config, config_path)

    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())

    logger.info("Configuration loaded and validated successfully.")
    return validated_config
