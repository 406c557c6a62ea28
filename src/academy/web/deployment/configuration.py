# standard library
import dataclasses
import os

from collections.abc import Mapping
from pathlib import Path

# typing
from typing import Literal, Optional

# third parties
from pydantic import PositiveFloat, PositiveInt
from pydantic.dataclasses import dataclass

# Academy
from academy.domain import DEVELOPMENT, ENV_PREFIX


@dataclass(frozen=True, kw_only=True)
class Configuration:
    """
    Configuration of the application, usually created from the environment variables using
    :meth:`ConfigurationFactory.set_from_env <academy.web.deployment.configuration.ConfigurationFactory.set_from_env>`:
    each attribute is read from the variable `ACADEMY_{ATTRIBUTE_NAME_UPPERCASE}`.
    """

    rest_timeout_seconds: PositiveFloat = 30
    """
    Timeout applied to each host attempted by the web repositories.
    """
    web_hosts: list[str] = dataclasses.field(default_factory=list)
    """
    Base URLs of the web services providing the people, comma separated in the environment.
    """
    people_source: Literal["db", "web"] = "db"
    """
    Whether the people are read from the local store or from `web_hosts`.
    """
    enable_auto_migrate_db: bool = False
    """
    Whether pending migrations are applied at startup.
    """
    session_ttl_minutes: PositiveInt = 20
    session_secret: Optional[str] = None
    """
    Key signing the session cookies, a random one is generated if not provided (sessions do not survive restarts).
    """
    use_https: bool = True
    environment: Literal["development", "staging", "production"] = "production"
    db_path: Optional[Path] = None
    """
    Root folder of the local store, tables are kept in memory if not provided.
    """
    cors_origin: str = "http://localhost:5001"
    """
    Origin of the front-end allowed by CORS in development.
    """
    enable_basic_auth: bool = False
    skip_tls_verification: bool = False
    """
    Whether TLS certificates of the web services are verified for `POST` requests.
    """
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: PositiveInt = 8080

    def __post_init__(self):
        if self.people_source == "web" and not self.web_hosts:
            raise ValueError("'web_hosts' is required when 'people_source' is 'web'")

    @property
    def is_development(self) -> bool:
        return self.environment == DEVELOPMENT


class ConfigurationFactory:
    __configuration: Configuration | None = None

    @classmethod
    def get(cls) -> Configuration:
        if ConfigurationFactory.__configuration is None:
            raise ValueError(
                "ConfigurationFactory.get() invoked before ConfigurationFactory.set()"
            )
        return ConfigurationFactory.__configuration

    @classmethod
    def set(cls, configuration: Configuration):
        if ConfigurationFactory.__configuration is not None:
            raise ValueError("ConfigurationFactory.set() invoked twice")
        ConfigurationFactory.__configuration = configuration

    @classmethod
    def reset(cls) -> None:
        ConfigurationFactory.__configuration = None

    @classmethod
    def set_from_env(cls, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Set the configuration from the environment variables prefixed by `ACADEMY_`, attributes with no
        corresponding variable keep their default value.

        Parameters:
            environ: The variables, `os.environ` if not provided.
        """
        env = os.environ if environ is None else environ
        values = {}
        for field in dataclasses.fields(Configuration):
            value = cls.__get_value_from_env(env, field.name.upper())
            if value is not None:
                values[field.name] = value
        if "web_hosts" in values:
            values["web_hosts"] = [
                host.strip() for host in values["web_hosts"].split(",") if host.strip()
            ]
        cls.set(Configuration(**values))

    @staticmethod
    def __get_value_from_env(env: Mapping[str, str], key: str) -> Optional[str]:
        v = env.get(f"{ENV_PREFIX}{key}")
        if v is None or v.strip() == "":
            return None
        return v.strip()
