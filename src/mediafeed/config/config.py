"""Application configuration management for mediafeed.

This module defines the settings model for the service and the settings
source that reads an optional YAML file named by the ``config_file`` field.
"""

import logging
from pathlib import Path
from typing import Any, Literal, cast

from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
import yaml

from ..exceptions import ConfigLoadError
from ..types import SessionContext

logger = logging.getLogger(__name__)


class YamlFileFromFieldSource(PydanticBaseSettingsSource):
    """Load configuration from a YAML file specified by a field.

    A settings source that loads configuration from the YAML file named by
    the ``config_file`` field of the settings model itself. It must run after
    all sources that might populate that field.

    Attributes:
        yaml_file_encoding: Encoding to use when reading the YAML file.
        yaml_data: Cached YAML data loaded from the file.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file_encoding: str | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file_encoding = yaml_file_encoding or "utf-8"
        self.yaml_data: dict[str, Any] = {}

    def _get_current_state_of(self, field_name: str) -> Any:
        """Get the current state of a field from the settings model."""
        value = self.current_state.get(field_name)
        if value not in (None, PydanticUndefined):
            return value

        field_info = self.settings_cls.model_fields[field_name]
        if isinstance(field_info.validation_alias, str):
            value = self.current_state.get(field_info.validation_alias)
            if value not in (None, PydanticUndefined):
                return value
        return field_info.get_default()

    def _get_yaml_path(self) -> Path | None:
        """Determine the YAML path from the already processed settings state."""
        match self._get_current_state_of("config_file"):
            case None:
                return None
            case Path() as path_value:
                return path_value.expanduser()
            case str() as path_value:
                return Path(path_value).expanduser()
            case path_value:
                raise TypeError(
                    f"Field 'config_file' must resolve to a Path or string, "
                    f"received type '{type(path_value).__name__}'"
                )

    def _read_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Read and parse the YAML file."""
        logger.debug(
            "Attempting to read and parse YAML file.",
            extra={"file_path": str(file_path)},
        )
        with Path.open(file_path, encoding=self.yaml_file_encoding) as f:
            loaded_yaml = yaml.safe_load(f)

        if isinstance(loaded_yaml, dict):
            return cast(dict[str, Any], loaded_yaml)
        elif loaded_yaml is None:
            logger.info(
                "YAML configuration file is empty.",
                extra={"file_path": str(file_path)},
            )
            return {}
        else:
            raise TypeError(
                f"Invalid YAML config format: expected dict, got {type(loaded_yaml).__name__}"
            )

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value from loaded YAML data."""
        field_value = self.yaml_data.get(field_name)
        return field_value, field_name, self.field_is_complex(field)

    def __call__(self) -> dict[str, Any]:
        """Load YAML data from the file named by the config_file field."""
        try:
            yaml_path = self._get_yaml_path()
        except TypeError as e:
            raise ConfigLoadError(
                "Failed to resolve YAML configuration file path.",
            ) from e

        if yaml_path is None:
            self.yaml_data = {}
            return {}

        # A missing optional file is not an error; an unreadable one is
        if not yaml_path.exists():
            logger.debug(
                "YAML configuration file not found; skipping.",
                extra={"file_path": str(yaml_path)},
            )
            self.yaml_data = {}
            return {}

        try:
            self.yaml_data = self._read_yaml_file(yaml_path)
        except (TypeError, OSError, yaml.YAMLError) as e:
            raise ConfigLoadError(
                "Failed to load or parse YAML configuration file.",
                config_file=str(yaml_path),
            ) from e

        return self.yaml_data.copy()


class AppSettings(BaseSettings):
    """Application settings.

    Loaded from init args, environment variables, CLI arguments, and finally
    an optional YAML file.

    Attributes:
        log_format: Format for application logs (human or json).
        log_level: Logging level for the application.
        log_include_stacktrace: Include full stack traces in error logs.
        data_dir: Root directory for local state (favorites database).
        config_file: Path to the optional YAML config file.
        server_host: Host address for the HTTP server to bind to.
        server_port: Port number for the HTTP server to listen on.
        backend_url: Base URL of the backend REST API.
        backend_api_key: API key sent to the backend with every request.
        backend_timeout: Timeout in seconds for backend requests.
        user_id: Identifier of the signed-in user.
        user_role: Role of the signed-in user.
        page_size: Number of catalog items per derived page.
        device_notifications: Whether device notification permission is granted.
        notification_icon: Icon used for device notifications without a thumbnail.
    """

    log_format: Literal["human", "json"] = Field(
        default="json",
        validation_alias="LOG_FORMAT",
        description="Format for application logs ('human' or 'json').",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level for the application (e.g., DEBUG, INFO, WARNING, ERROR). Case-insensitive.",
    )
    log_include_stacktrace: bool = Field(
        default=False,
        validation_alias="LOG_INCLUDE_STACKTRACE",
        description="Include full stack traces in error logs (true/false).",
    )
    data_dir: Path = Field(
        default=Path("/data"),
        validation_alias="DATA_DIR",
        description="Root directory for local state such as the favorites database.",
    )
    config_file: Path = Field(
        default=Path("/config/mediafeed.yaml"),
        validation_alias="CONFIG_FILE",
        description="Path to the optional YAML config file.",
    )

    # Server configuration
    server_host: str = Field(
        default="127.0.0.1",
        validation_alias="SERVER_HOST",
        description="Host address for the HTTP server to bind to.",
    )
    server_port: int = Field(
        default=8030,
        validation_alias="SERVER_PORT",
        description="Port number for the HTTP server to listen on.",
    )

    # Backend collaborator
    backend_url: str = Field(
        default="http://localhost:54321",
        validation_alias="BACKEND_URL",
        description="Base URL of the backend REST API (e.g. 'https://project.example.co').",
    )
    backend_api_key: str = Field(
        default="",
        validation_alias="BACKEND_API_KEY",
        description="API key sent with every backend request.",
    )
    backend_timeout: float = Field(
        default=10.0,
        gt=0,
        validation_alias="BACKEND_TIMEOUT",
        description="Timeout in seconds for backend requests.",
    )

    # Session
    user_id: str = Field(
        default="local-user",
        validation_alias="USER_ID",
        description="Identifier of the signed-in user.",
    )
    user_role: Literal["admin", "user"] = Field(
        default="user",
        validation_alias="USER_ROLE",
        description="Role of the signed-in user ('admin' or 'user').",
    )

    # Library view
    page_size: int = Field(
        default=12,
        gt=0,
        validation_alias="PAGE_SIZE",
        description="Number of catalog items per page.",
    )
    device_notifications: bool = Field(
        default=True,
        validation_alias="DEVICE_NOTIFICATIONS",
        description="Grant device-level notification permission (true/false).",
    )
    notification_icon: str = Field(
        default="/st-refka.png",
        validation_alias="NOTIFICATION_ICON",
        description="Icon for device notifications when an item has no thumbnail.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        yaml_file_encoding="utf-8",
        cli_parse_args=False,
        populate_by_name=True,
        extra="ignore",
    )

    def session_context(self) -> SessionContext:
        """Build the session context handed to the library engine."""
        return SessionContext(user_id=self.user_id, role=self.user_role)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order and sources for settings loading.

        Init and environment sources run first so they can set ``config_file``;
        :class:`YamlFileFromFieldSource` then reads that file.

        Args:
            settings_cls: The settings class being configured.
            init_settings: Settings from initialization parameters.
            env_settings: Settings from environment variables.
            dotenv_settings: Settings from .env files.
            file_secret_settings: Settings from secret files.

        Returns:
            Tuple of settings sources in the order they should be processed.
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlFileFromFieldSource(settings_cls=settings_cls),
            file_secret_settings,
        )
