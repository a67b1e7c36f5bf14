from dataclasses import dataclass

from budget_intelligence.core import settings


@dataclass(frozen=True)
class EngineTuning:
    """Hand-tuned scoring constants, kept overridable for parity tuning."""

    # Classification
    override_confidence: int = 100
    keyword_confidence: int = 70
    fallback_confidence: int = 50
    exact_match_score: int = 100
    word_overlap_weight: float = 80.0
    amount_proximity_bonus: int = 20
    amount_proximity_band: float = 0.3
    min_match_score: int = 30
    max_suggestions: int = 3

    # Learning
    manual_initial_confidence: int = 50
    confirmed_initial_confidence: int = 60
    confidence_step: int = 10
    max_confidence: int = 100

    # Anomaly detection
    anomaly_threshold: float = 2.0
    anomaly_min_samples: int = 3
    anomaly_lookback_months: int = 6

    # Recommendations
    recommendation_window_months: int = 3
    recommendation_spend_multiplier: float = 2.0
    recommendation_forecast_months: int = 3

    # Stats
    high_confidence_threshold: int = 80
    top_categories_limit: int = 5

    @classmethod
    def from_env(cls) -> "EngineTuning":
        defaults = cls()
        return cls(
            keyword_confidence=settings.get_env_int(
                "KEYWORD_CONFIDENCE", defaults.keyword_confidence, min_value=0, max_value=100
            ),
            min_match_score=settings.get_env_int(
                "MIN_MATCH_SCORE", defaults.min_match_score, min_value=0, max_value=100
            ),
            amount_proximity_band=settings.get_env_float(
                "AMOUNT_PROXIMITY_BAND", defaults.amount_proximity_band, min_value=0.0
            ),
            anomaly_threshold=settings.get_env_float(
                "ANOMALY_THRESHOLD", defaults.anomaly_threshold, min_value=0.0
            ),
            anomaly_min_samples=settings.get_env_int(
                "ANOMALY_MIN_SAMPLES", defaults.anomaly_min_samples, min_value=1
            ),
            anomaly_lookback_months=settings.get_env_int(
                "ANOMALY_LOOKBACK_MONTHS", defaults.anomaly_lookback_months, min_value=1
            ),
        )
