# Methodology strategies
#
# One MethodologyStrategy per periodization philosophy. Importing this
# package registers every strategy with MethodologyRegistry.

from .base import MethodologyStrategy, WeekContext, interval_pace_for_duration
from .registry import MethodologyRegistry
from .polarized import PolarizedStrategy
from .norwegian import NorwegianSingleStrategy, NorwegianDoublesStrategy
from .canova import CanovaStrategy, CanovaPeriod
from .pyramidal import PyramidalStrategy
from ..constants import Methodology


def get_strategy(methodology: Methodology) -> MethodologyStrategy:
    """Registered strategy for a methodology; every Methodology member has one."""
    strategy = MethodologyRegistry.get(methodology)
    if strategy is None:
        raise KeyError(f"No strategy registered for {methodology}")
    return strategy


__all__ = [
    'MethodologyStrategy',
    'WeekContext',
    'MethodologyRegistry',
    'interval_pace_for_duration',
    'get_strategy',

    'PolarizedStrategy',
    'NorwegianSingleStrategy',
    'NorwegianDoublesStrategy',
    'CanovaStrategy',
    'CanovaPeriod',
    'PyramidalStrategy',
]
