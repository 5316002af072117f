"""Settings de processo do booking core.

Ambiente de execucao e conexao Redis. O Redis guarda o estado que precisa
ser compartilhado entre instancias: o lock por prestador (serializa check
de overlap + commit) e o registro de jobs de cobranca.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]

_ENVIRONMENT_ALIASES: dict[str, Environment] = {
    "production": "production",
    "prod": "production",
    "staging": "staging",
    "stage": "staging",
}

REDIS_SCHEMES = ("redis://", "rediss://", "unix://")


@dataclass(frozen=True)
class BaseSettings:
    """Settings de processo.

    Attributes:
        environment: development roda com lock e jobs em memoria;
            staging/production exigem Redis
        service_name: Valor do campo `service` nos logs
        debug: Modo debug ativo
        redis_url: Redis do lock por prestador e do registro de jobs
    """

    environment: Environment = "development"
    service_name: str = "booking_core"
    debug: bool = False
    redis_url: str = ""

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def requires_shared_state(self) -> bool:
        """Fora de development varias instancias disputam o mesmo prestador."""
        return not self.is_development

    def validate(self) -> list[str]:
        """Valida settings de processo.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []

        if not self.service_name:
            errors.append("SERVICE_NAME nao pode ser vazio")

        if self.redis_url and not self.redis_url.startswith(REDIS_SCHEMES):
            errors.append(f"REDIS_URL com esquema desconhecido: {self.redis_url.split(':', 1)[0]}")
        elif self.requires_shared_state and not self.redis_url:
            errors.append("REDIS_URL obrigatorio fora de development")

        return errors


def _parse_environment(env_str: str) -> Environment:
    """Aliases de ENVIRONMENT; qualquer outro valor cai em development."""
    return _ENVIRONMENT_ALIASES.get(env_str.strip().lower(), "development")


def _parse_flag(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _load_base_from_env() -> BaseSettings:
    return BaseSettings(
        environment=_parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "booking_core"),
        debug=_parse_flag(os.getenv("DEBUG", "")),
        redis_url=os.getenv("REDIS_URL", "").strip(),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna instancia cacheada de BaseSettings."""
    return _load_base_from_env()
