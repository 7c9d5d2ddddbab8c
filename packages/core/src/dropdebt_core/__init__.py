"""DropDebt Core - Budget protection and bill prioritization engine."""

__version__ = "0.1.0"

from .calculator import BudgetCalculator
from .config import EngineSettings, load_settings
from .consequences import ConsequenceTracker
from .crisis import CrisisAggregator
from .engine import RecommendationEngine
from .exceptions import ConfigurationError, DropDebtError, InvalidInputError
from .integrator import BudgetBillIntegrator
from .models import FinancialSnapshot, RecommendationReport
from .priority import PriorityScorer
from .resources import EmergencyResourceAdvisor
from .validator import PaymentPlanValidator

__all__ = [
    "BudgetCalculator",
    "PaymentPlanValidator",
    "PriorityScorer",
    "BudgetBillIntegrator",
    "CrisisAggregator",
    "ConsequenceTracker",
    "EmergencyResourceAdvisor",
    "RecommendationEngine",
    "EngineSettings",
    "load_settings",
    "FinancialSnapshot",
    "RecommendationReport",
    "DropDebtError",
    "InvalidInputError",
    "ConfigurationError",
]
