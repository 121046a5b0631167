"""
Ergometer Training Zones

Six-zone power model derived from whichever threshold the athlete tested:

- CP: critical power from a 3-minute all-out or multi-trial test
- FTP_20MIN: 20-minute time trial, corrected for cycling background
- MAP: maximal aerobic power from a ramp test (separate % bands)
- INTERVAL_4X4: average power of a 4x4 min session

Concept2 machines can also get a pace (sec/500m) for every zone boundary.

Usage:
    zones = calculate_ergometer_zones(280, ThresholdMethod.CP)
    zones = calculate_ergometer_zones(300, ThresholdMethod.FTP_20MIN,
                                      background=CyclingBackground.UNTRAINED,
                                      include_concept2_pace=True)
"""
from typing import List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import logging

from core.config import settings
from core.exceptions import InvalidInputError
from services.concept2 import watts_to_pace

logger = logging.getLogger(__name__)


class ThresholdMethod(str, Enum):
    CP = "CP"
    FTP_20MIN = "FTP_20MIN"
    MAP = "MAP"
    INTERVAL_4X4 = "INTERVAL_4X4"


class CyclingBackground(str, Enum):
    CYCLIST = "cyclist"
    TRAINED_NON_CYCLIST = "trainedNonCyclist"
    UNTRAINED = "untrained"


# Non-cyclists test high on a 20-min effort because of a large W'
FTP_CORRECTION_FACTORS = {
    CyclingBackground.CYCLIST: 0.95,
    CyclingBackground.TRAINED_NON_CYCLIST: 0.92,
    CyclingBackground.UNTRAINED: 0.90,
}

# (zone, name, % min, % max, description)
CP_BASED_ZONES: List[Tuple[int, str, float, float, str]] = [
    (1, "Recovery", 0, 55, "Active recovery, warm-up, cool-down"),
    (2, "Endurance", 56, 75, "Aerobic base building, fat oxidation"),
    (3, "Tempo", 76, 90, "Sustained work, lactate clearance training"),
    (4, "Threshold", 91, 105, "Critical Power / FTP intensity, race pace"),
    (5, "VO2max", 106, 120, "High-intensity intervals, VO2max development"),
    (6, "Anaerobic", 121, 200, "Sprint, glycolytic capacity, neuromuscular power"),
]

MAP_BASED_ZONES: List[Tuple[int, str, float, float, str]] = [
    (1, "Recovery", 0, 45, "Active recovery, warm-up, cool-down"),
    (2, "Endurance", 45, 60, "Aerobic base building"),
    (3, "Tempo", 60, 75, "Sustained aerobic work"),
    (4, "Threshold", 75, 85, "Around the lactate threshold"),
    (5, "VO2max", 85, 100, "Maximal aerobic intervals"),
    (6, "Anaerobic", 100, 150, "Supra-maximal efforts"),
]


@dataclass(frozen=True)
class ErgometerZone:
    zone: int
    name: str
    percent_min: float
    percent_max: float
    min_watts: int
    max_watts: int
    description: str
    pace_slow: Optional[float] = None    # sec/500m at min_watts
    pace_fast: Optional[float] = None    # sec/500m at max_watts


@dataclass
class ErgometerZoneSet:
    method: ThresholdMethod
    tested_watts: float
    anchor_watts: int          # CP-equivalent (or MAP) the bands are scaled from
    zones: List[ErgometerZone]
    warnings: List[str] = field(default_factory=list)

    def zone_for_power(self, watts: float) -> int:
        for zone in self.zones:
            if watts <= zone.max_watts:
                return zone.zone
        return self.zones[-1].zone


def zone_for_percent(percent_of_cp: float) -> int:
    """CP-based zone number for an intensity given as % of CP."""
    for zone, _, _, pct_max, _ in CP_BASED_ZONES[:-1]:
        if percent_of_cp < pct_max + 1:
            return zone
    return CP_BASED_ZONES[-1][0]


def anchor_from_test(
    tested_watts: float,
    method: ThresholdMethod,
    background: CyclingBackground = CyclingBackground.CYCLIST,
) -> float:
    """Convert a tested power into the value the zone bands are scaled from."""
    if method == ThresholdMethod.FTP_20MIN:
        return tested_watts * FTP_CORRECTION_FACTORS[background]
    if method == ThresholdMethod.INTERVAL_4X4:
        return tested_watts * settings.INTERVAL_CP_FACTOR
    return tested_watts


def calculate_ergometer_zones(
    tested_watts: float,
    method: ThresholdMethod = ThresholdMethod.CP,
    background: CyclingBackground = CyclingBackground.CYCLIST,
    include_concept2_pace: bool = False,
) -> ErgometerZoneSet:
    """
    Build the six training zones for an ergometer.

    Raises:
        InvalidInputError: non-positive tested power
    """
    if tested_watts <= 0:
        raise InvalidInputError("Threshold power must be positive", field="threshold_watts")

    warnings: List[str] = []
    if tested_watts < settings.ERGOMETER_MIN_POWER_W or tested_watts > settings.ERGOMETER_MAX_POWER_W:
        warnings.append(f"Tested power {tested_watts:.0f}W is outside the plausible range")

    anchor = anchor_from_test(tested_watts, method, background)
    bands = MAP_BASED_ZONES if method == ThresholdMethod.MAP else CP_BASED_ZONES

    zones: List[ErgometerZone] = []
    for zone, name, pct_min, pct_max, description in bands:
        min_watts = round(anchor * pct_min / 100)
        max_watts = round(anchor * pct_max / 100)

        pace_slow = pace_fast = None
        # bands that round to 0W have no pace
        if include_concept2_pace:
            if min_watts > 0:
                pace_slow = round(watts_to_pace(min_watts).value, 1)
            if max_watts > 0:
                pace_fast = round(watts_to_pace(max_watts).value, 1)

        zones.append(ErgometerZone(
            zone=zone,
            name=name,
            percent_min=pct_min,
            percent_max=pct_max,
            min_watts=min_watts,
            max_watts=max_watts,
            description=description,
            pace_slow=pace_slow,
            pace_fast=pace_fast,
        ))

    logger.debug("Ergometer zones from %s: anchor %.0fW", method.value, anchor)

    return ErgometerZoneSet(
        method=method,
        tested_watts=tested_watts,
        anchor_watts=round(anchor),
        zones=zones,
        warnings=warnings,
    )
