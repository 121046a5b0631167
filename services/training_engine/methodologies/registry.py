"""
Methodology Registry

Maps each Methodology to its strategy instance. Strategies register with
the decorator when their module is imported.

Usage:
    @MethodologyRegistry.register
    class PolarizedStrategy(MethodologyStrategy):
        ...

    strategy = MethodologyRegistry.get(Methodology.CANOVA)
"""

from typing import Dict, List, Optional, Type
import logging

from ..constants import Methodology
from .base import MethodologyStrategy

logger = logging.getLogger(__name__)


class MethodologyRegistry:
    _strategies: Dict[Methodology, MethodologyStrategy] = {}

    @classmethod
    def register(cls, strategy_class: Type[MethodologyStrategy]) -> Type[MethodologyStrategy]:
        instance = strategy_class()
        methodology = instance.methodology

        if methodology in cls._strategies:
            logger.warning(f"Overwriting existing strategy for methodology: {methodology.value}")

        cls._strategies[methodology] = instance
        logger.debug(f"Registered methodology strategy: {methodology.value}")
        return strategy_class

    @classmethod
    def get(cls, methodology: Methodology) -> Optional[MethodologyStrategy]:
        return cls._strategies.get(methodology)

    @classmethod
    def available(cls) -> List[Methodology]:
        return list(cls._strategies)

    @classmethod
    def is_registered(cls, methodology: Methodology) -> bool:
        return methodology in cls._strategies
