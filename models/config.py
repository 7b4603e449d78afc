import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel

from models.schema import Config


class Settings(BaseModel):
    database_url: str = "sqlite:///punches.db"
    config_path: str = "config.json"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("PUNCHCLOCK_DATABASE_URL", cls.model_fields["database_url"].default),
            config_path=os.getenv("PUNCHCLOCK_CONFIG_PATH", cls.model_fields["config_path"].default),
            log_level=os.getenv("PUNCHCLOCK_LOG_LEVEL", cls.model_fields["log_level"].default),
        )


class ConfigStore:
    """JSON-file backed configuration, persisted on every change."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            return self.load()
        return self._config

    def load(self) -> Config:
        if not self.path.exists():
            logging.info(f"No configuration at {self.path}, writing defaults")
            self._config = Config()
            self._save()
            return self._config

        self._config = Config.model_validate_json(self.path.read_text())
        logging.info(f"Configuration loaded from {self.path}")
        return self._config

    def update(self, **changes) -> Config:
        # validate the merged document so a bad change never reaches disk
        document = self.config.model_dump()
        document.update(changes)
        self._config = Config.model_validate(document)
        self._save()
        return self._config

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self._config.model_dump_json(by_alias=True, indent=4))
