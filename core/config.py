# core/config.py
"""
Paths, limits and the thresholds every calculation leans on.

Values here are the defaults. Paths and log level can be overridden from the
environment (or a local .env file).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# ==================================================
# STORAGE
# ==================================================
DATA_DIR = Path(os.getenv("FINANCE_DATA_DIR", "data"))
MAX_BACKUPS = int(os.getenv("FINANCE_MAX_BACKUPS", "10"))

LOG_LEVEL = os.getenv("FINANCE_LOG_LEVEL", "WARNING")

# ==================================================
# AFFORDABILITY
# ==================================================
# Share of liquid balance kept aside as an emergency reserve.
EMERGENCY_RESERVE_SHARE = 0.30
# Months of (expenses + EMIs) that must still be covered after a purchase.
MIN_COVERAGE_AFTER_PURCHASE = 3
# Share of current expenses that must remain free after a new EMI.
NEW_EMI_BUFFER_SHARE = 0.20
# Ceiling for a new EMI, as a share of disposable income.
RECOMMENDED_EMI_SHARE = 0.30
# Share of disposable income put towards an unaffordable purchase each month.
SHORTFALL_SAVING_SHARE = 0.50

# ==================================================
# EMI QUOTES
# ==================================================
GOOD_EMI_INCOME_RATIO = 0.30
GOOD_EMI_DISPOSABLE_RATIO = 0.50
MODERATE_EMI_INCOME_RATIO = 0.50
MODERATE_EMI_DISPOSABLE_RATIO = 0.80

MAX_EMI_SHARE_OF_DISPOSABLE = 0.50
TARGET_EMI_SHARE_OF_DISPOSABLE = 0.30
MAX_SUGGESTED_TENURE = 240  # 20 years

# Longest loan the engine quotes or amortizes (50 years).
MAX_TENURE_MONTHS = 600
MAX_SCHEDULE_MONTHS = MAX_TENURE_MONTHS

# ==================================================
# PROJECTION
# ==================================================
PROJECTION_CRITICAL_BALANCE = 10_000
PROJECTION_WARNING_BALANCE = 25_000
MAX_PROJECTION_MONTHS = 240

# ==================================================
# HEALTH SCORE
# ==================================================
HEALTH_BASE_SCORE = 50

# (minimum months of coverage, points)
EMERGENCY_SCORE_TIERS = ((6, 20), (3, 10))
# (debt-to-income below, points); anything above the last tier gets the penalty
DEBT_RATIO_SCORE_TIERS = ((0.2, 15), (0.4, 5))
DEBT_RATIO_PENALTY = -10
# (savings rate % at least, points)
SAVINGS_SCORE_TIERS = ((20, 15), (10, 5))
NEGATIVE_SAVINGS_PENALTY = -15

HEALTH_LABELS = ((80, "Excellent"), (60, "Good"), (40, "Fair"))
HEALTH_LABEL_FLOOR = "Needs Improvement"

# ==================================================
# DEBT ALERTS
# ==================================================
HIGH_EMI_INCOME_SHARE = 0.5
CLOSING_SOON_MONTHS = 6
HIGH_INTEREST_RATE = 15

# ==================================================
# FORECAST INSIGHTS
# ==================================================
HIGH_EMI_INCOME_PERCENT = 40
EMERGENCY_FUND_TARGET_MONTHS = 3
EMERGENCY_FUND_PRIORITY_PERCENT = 50


@dataclass(frozen=True)
class ProjectionThresholds:
    critical: float = PROJECTION_CRITICAL_BALANCE
    warning: float = PROJECTION_WARNING_BALANCE

    def status(self, balance: float) -> str:
        if balance < self.critical:
            return "critical"
        if balance < self.warning:
            return "warning"
        return "good"


@dataclass(frozen=True)
class AffordabilityRules:
    reserve_share: float = EMERGENCY_RESERVE_SHARE
    min_coverage_months: float = MIN_COVERAGE_AFTER_PURCHASE
    emi_buffer_share: float = NEW_EMI_BUFFER_SHARE


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
