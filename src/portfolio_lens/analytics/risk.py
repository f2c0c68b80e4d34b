"""Concentration, diversification and volatility scores for a set of holdings.

Uses numpy for the weight and dispersion arithmetic. Scores are roughly in
[0, 100] but not clamped; display code clamps.
"""

from collections.abc import Sequence

import numpy as np

from portfolio_lens.domain.models import Holding, RiskMetrics


def calculate_risk_metrics(holdings: Sequence[Holding]) -> RiskMetrics:
    """Herfindahl concentration, its inverse as diversification, and gain/loss dispersion.

    - ``concentration``: sum of squared value weights, scaled x100.
    - ``diversification_score``: ``max(0, (1 - herfindahl) * 100)`` on the
      unscaled index.
    - ``volatility_score``: population standard deviation of the holdings'
      unrealized gain/loss percents.
    """
    if not holdings:
        return RiskMetrics()

    values = np.array([h.current_value for h in holdings], dtype=float)
    total = float(values.sum())
    if total <= 0:
        return RiskMetrics()

    weights = values / total
    herfindahl = float(np.sum(weights**2))

    returns = np.array([h.unrealized_gain_loss_percent for h in holdings], dtype=float)
    volatility = float(np.std(returns))  # ddof=0

    return RiskMetrics(
        concentration=herfindahl * 100,
        diversification_score=max(0.0, (1 - herfindahl) * 100),
        volatility_score=volatility,
    )


def clamp_score(score: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a risk score into its display range."""
    return min(high, max(low, score))
