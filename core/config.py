#!/usr/bin/env python3
"""
Configuration centralisée du bot.

Sources (priorité décroissante):
1. Arguments passés au constructeur (tests, CLI)
2. Variables d'environnement (BOT_TOKEN, ADMIN_IDS, VOTEBAN_THRESHOLD...)
3. Fichier .env
4. config/config.yaml (optionnel)
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional, Tuple, Type

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"


class Settings(BaseSettings):
    """Configuration via variables d'environnement (+ .env / config.yaml)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        yaml_file=DEFAULT_CONFIG_PATH,
    )

    # Telegram
    bot_token: str = Field(min_length=1)

    # IDs Telegram recevant le log d'audit et autorisés à gérer les mots
    admin_ids: Annotated[List[int], NoDecode] = Field(default_factory=list)

    # Voteban: nombre de votes dans un même sens pour trancher (>= 2)
    voteban_threshold: int = Field(default=5, ge=2)

    # Stockage
    database_path: str = "varta.db"

    @field_validator("admin_ids", mode="before")
    @classmethod
    def _split_admin_ids(cls, value):
        """ADMIN_IDS="123, 456" -> [123, 456]"""
        if isinstance(value, int):
            return [value]
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    def is_admin(self, user_id: int) -> bool:
        """L'utilisateur fait-il partie des admins configurés ?"""
        return user_id in self.admin_ids


def load_settings(config_path: Optional[str] = None, **overrides) -> Settings:
    """
    Charge la configuration.

    Args:
        config_path: YAML alternatif (--config). Ignoré s'il n'existe pas.
        **overrides: Valeurs prioritaires sur toutes les sources

    Raises:
        pydantic.ValidationError: config invalide (ex: BOT_TOKEN manquant)
    """
    if config_path and not Path(config_path).exists():
        LOGGER.warning(f"⚠️ Config file {config_path} not found, using env only")
        config_path = None

    if config_path:
        class FileSettings(Settings):
            model_config = SettingsConfigDict(yaml_file=config_path)

        settings = FileSettings(**overrides)
    else:
        settings = Settings(**overrides)

    LOGGER.info(
        f"⚙️ Config loaded: {len(settings.admin_ids)} admins, "
        f"voteban threshold={settings.voteban_threshold}, db={settings.database_path}"
    )
    return settings
