"""Configuration manager for loading and saving Podtally config."""

import logging
from pathlib import Path

import yaml

from podtally.config.defaults import (
    DEFAULT_GLOBAL_CONFIG,
    get_default_config_content,
    get_default_shows_content,
)
from podtally.config.schema import GlobalConfig, ShowConfig, Shows
from podtally.utils.errors import DuplicateShowError, InvalidConfigError, ShowNotFoundError
from podtally.utils.paths import (
    get_config_dir,
    get_config_file,
    get_default_database_path,
    get_shows_file,
)
from podtally.utils.text import slugify

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages Podtally configuration files."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
        """
        if config_dir is None:
            self.config_dir = get_config_dir()
            self.config_file = get_config_file()
            self.shows_file = get_shows_file()
        else:
            self.config_dir = config_dir
            self.config_file = config_dir / "config.yaml"
            self.shows_file = config_dir / "shows.yaml"

    def load_config(self) -> GlobalConfig:
        """Load and validate global configuration.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config is invalid
        """
        if not self.config_file.exists():
            self._create_default_config()
            return DEFAULT_GLOBAL_CONFIG.model_copy(deep=True)

        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return GlobalConfig(**data)
        except Exception as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save global configuration.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json", exclude_none=True)

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def database_path(self, config: GlobalConfig | None = None) -> Path:
        """Resolve the episode database location."""
        config = config or self.load_config()
        if config.database_path is not None:
            return config.database_path.expanduser()
        return get_default_database_path()

    def load_shows(self) -> Shows:
        """Load the show registry.

        Returns:
            Shows instance

        Raises:
            InvalidConfigError: If shows file is invalid
        """
        if not self.shows_file.exists():
            self._create_default_shows()

        try:
            with open(self.shows_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return Shows(**data)
        except Exception as e:
            raise InvalidConfigError(
                f"Invalid shows configuration in {self.shows_file}: {e}"
            ) from e

    def save_shows(self, shows: Shows) -> None:
        """Save the show registry.

        Args:
            shows: Shows instance to save
        """
        data = shows.model_dump(mode="json", exclude_none=True)

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.shows_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
            )

    def add_show(self, show_config: ShowConfig, show_id: str | None = None) -> str:
        """Register a new show.

        When no identifier is given one is generated from the display name.
        Generated identifiers get a numeric suffix if the slug is taken, so
        two shows sharing a display name never share an identifier.

        Args:
            show_config: Show configuration
            show_id: Explicit identifier (optional)

        Returns:
            The identifier the show was stored under

        Raises:
            DuplicateShowError: If an explicit identifier already exists
        """
        shows = self.load_shows()

        if show_id is not None:
            if show_id in shows.shows:
                raise DuplicateShowError(
                    f"Show '{show_id}' already exists. Use update-source to modify it."
                )
        else:
            show_id = self._generate_id(show_config.name, shows)

        shows.shows[show_id] = show_config
        self.save_shows(shows)
        logger.info(f"Added show '{show_id}' ({show_config.name})")
        return show_id

    def update_source(self, show_id: str, locator: str) -> ShowConfig:
        """Correct the source locator of an existing show.

        The locator is the only attribute that may change after creation.

        Raises:
            ShowNotFoundError: If show doesn't exist
        """
        shows = self.load_shows()

        if show_id not in shows.shows:
            raise ShowNotFoundError(f"Show '{show_id}' not found")

        updated = ShowConfig.model_validate(
            {**shows.shows[show_id].model_dump(), "locator": locator}
        )
        shows.shows[show_id] = updated
        self.save_shows(shows)
        return updated

    def remove_show(self, show_id: str) -> None:
        """Remove a show.

        Raises:
            ShowNotFoundError: If show doesn't exist
        """
        shows = self.load_shows()

        if show_id not in shows.shows:
            raise ShowNotFoundError(f"Show '{show_id}' not found")

        del shows.shows[show_id]
        self.save_shows(shows)

    def get_show(self, show_id: str) -> ShowConfig:
        """Get a single show configuration.

        Raises:
            ShowNotFoundError: If show doesn't exist
        """
        shows = self.load_shows()

        if show_id not in shows.shows:
            raise ShowNotFoundError(f"Show '{show_id}' not found")

        return shows.shows[show_id]

    def list_shows(self) -> dict[str, ShowConfig]:
        """List all shows keyed by identifier."""
        return self.load_shows().shows

    @staticmethod
    def _generate_id(name: str, shows: Shows) -> str:
        base = slugify(name)
        candidate = base
        suffix = 2
        while candidate in shows.shows:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def _create_default_config(self) -> None:
        """Create default config.yaml file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(get_default_config_content(), encoding="utf-8")

    def _create_default_shows(self) -> None:
        """Create default shows.yaml file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.shows_file.write_text(get_default_shows_content(), encoding="utf-8")
