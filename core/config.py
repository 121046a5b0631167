"""
Centralized configuration management with validation.

All environment variables are loaded and validated here, including the
calibration thresholds used by the estimators and scoring functions so they
can be retuned without touching algorithm code.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")

    # VDOT
    VDOT_PREDICTION_ITERATIONS: int = Field(default=10, ge=1, le=50)
    VDOT_POWER_LAW_EXPONENT: float = Field(default=1.06)

    # 3-minute all-out test
    CP_3MIN_MIN_SAMPLES: int = Field(default=150)
    CP_3MIN_NOMINAL_SAMPLES: int = Field(default=180)
    CP_3MIN_FINAL_WINDOW_S: int = Field(default=30)
    CP_3MIN_MAX_VALID_POWER: float = Field(default=3000.0)
    CP_3MIN_MIN_VALID_FRACTION: float = Field(default=0.9)
    CP_3MIN_END_DRIFT_PCT: float = Field(default=5.0)
    CP_3MIN_LATE_PEAK_S: int = Field(default=45)
    CP_3MIN_MIN_DECAY_PCT: float = Field(default=30.0)
    CP_3MIN_W_PRIME_MIN_KJ: float = Field(default=8.0)
    CP_3MIN_W_PRIME_MAX_KJ: float = Field(default=60.0)
    CP_3MIN_PENALTY_NO_START_SURGE: int = Field(default=20)
    CP_3MIN_PENALTY_FLAT_MIDDLE: int = Field(default=10)
    CP_3MIN_PENALTY_LATE_PEAK: int = Field(default=15)
    CP_3MIN_PENALTY_W_PRIME_RANGE: int = Field(default=15)
    CP_3MIN_PENALTY_LOW_DECAY: int = Field(default=20)
    CP_3MIN_SCORE_VERY_HIGH: int = Field(default=85)
    CP_3MIN_SCORE_HIGH: int = Field(default=70)
    CP_3MIN_SCORE_MEDIUM: int = Field(default=55)

    # Multi-trial critical power
    CP_TRIAL_MIN_COUNT: int = Field(default=2)
    CP_TRIAL_RECOMMENDED_COUNT: int = Field(default=3)
    CP_TRIAL_OPTIMAL_COUNT: int = Field(default=4)
    CP_TRIAL_MIN_DURATION_RATIO: float = Field(default=2.5)
    CP_TRIAL_RESIDUAL_PCT: float = Field(default=5.0)
    CP_PLAUSIBLE_MIN_W: float = Field(default=50.0)
    CP_PLAUSIBLE_MAX_W: float = Field(default=600.0)
    CP_R2_EXCELLENT: float = Field(default=0.95)
    CP_R2_GOOD: float = Field(default=0.90)
    CP_R2_FAIR: float = Field(default=0.85)
    CP_CONFIDENCE_VERY_HIGH: float = Field(default=95.0)
    CP_CONFIDENCE_HIGH: float = Field(default=85.0)
    CP_CONFIDENCE_MEDIUM: float = Field(default=75.0)

    # W' balance (Skiba)
    W_PRIME_TAU_S: float = Field(default=546.0, gt=0)
    W_PRIME_LOW_FACTOR: float = Field(default=0.7)
    W_PRIME_HIGH_FACTOR: float = Field(default=1.3)

    # 4x4 interval test
    INTERVAL_CV_EXCELLENT_PCT: float = Field(default=3.0)
    INTERVAL_CV_GOOD_PCT: float = Field(default=5.0)
    INTERVAL_CV_FAIR_PCT: float = Field(default=10.0)
    INTERVAL_CP_FACTOR: float = Field(default=0.95)
    INTERVAL_CP_FACTOR_POOR_PACING: float = Field(default=0.92)
    INTERVAL_CP_FACTOR_EVEN_PACING: float = Field(default=0.97)
    INTERVAL_DECOUPLING_HIGH_PCT: float = Field(default=15.0)
    INTERVAL_DECOUPLING_LOW_PCT: float = Field(default=3.0)

    # Concept2
    CONCEPT2_PACE_CONSTANT: float = Field(default=2.80)
    CONCEPT2_MIN_PACE_S: float = Field(default=60.0)
    CONCEPT2_MAX_PACE_S: float = Field(default=300.0)
    ERGOMETER_MIN_POWER_W: float = Field(default=50.0)
    ERGOMETER_MAX_POWER_W: float = Field(default=2500.0)

    # Peak power tests (6s, 7-stroke, 30s sprint)
    PEAK_POWER_TEST_DURATION_S: int = Field(default=6)
    PEAK_POWER_RATIO_MIN: float = Field(default=1.05)
    PEAK_POWER_RATIO_MAX: float = Field(default=1.4)
    PEAK_POWER_DECAY_HIGH_PCT: float = Field(default=30.0)
    PEAK_POWER_DECAY_LOW_PCT: float = Field(default=5.0)
    PEAK_POWER_SCORE_VERY_HIGH: int = Field(default=85)
    PEAK_POWER_SCORE_HIGH: int = Field(default=70)
    PEAK_POWER_SCORE_MEDIUM: int = Field(default=55)
    SPRINT_MIN_SAMPLES: int = Field(default=25)
    SPRINT_MIN_POWER_FRACTION: float = Field(default=0.65)
    SPRINT_FATIGUE_EXCELLENT_PCT: float = Field(default=35.0)
    SPRINT_FATIGUE_GOOD_PCT: float = Field(default=45.0)
    SPRINT_FATIGUE_FAIR_PCT: float = Field(default=55.0)
    SPRINT_CAPACITY_HIGH_W: float = Field(default=700.0)
    SPRINT_CAPACITY_MODERATE_W: float = Field(default=500.0)

    # Cross-tier evidence consistency
    EVIDENCE_MAX_MISMATCH_PCT: float = Field(default=15.0)


# Global settings instance
settings = Settings()
