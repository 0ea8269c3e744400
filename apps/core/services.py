"""
Core App - Policy configuration resolved per operation.
"""
import logging
from dataclasses import dataclass

from django.conf import settings

from apps.core.models import ConfigKey, SystemConfiguration

logger = logging.getLogger(__name__)


def _resolve_flag(key: str) -> bool:
    """Database value first, then settings/environment, then False."""
    stored = SystemConfiguration.get_flag(key)
    if stored is not None:
        return stored
    return bool(getattr(settings, key, False))


@dataclass(frozen=True)
class PolicyConfig:
    allow_negative_stock: bool = False
    allow_forced_adjustments: bool = False

    @classmethod
    def load(cls) -> 'PolicyConfig':
        """
        Reads both flags fresh. Call once inside the operation's
        transaction.atomic() block and pass the result down.
        """
        policy = cls(
            allow_negative_stock=_resolve_flag(ConfigKey.PERMITIR_ESTOQUE_NEGATIVO),
            allow_forced_adjustments=_resolve_flag(ConfigKey.PERMITIR_AJUSTES_FORCADOS),
        )
        logger.debug(f"Policy loaded: {policy}")
        return policy
