from .snapshot import PortfolioSnapshot, Position, Token
from .apy import APYDisplay, APYResult, ConfidenceAssessment, PositionAPYResponse
from .nav import (
    AvailableMonth,
    FeeSettings,
    NAVCalculationResult,
    NAVHistory,
    NAVHistoryEntry,
    NAVSettings,
    NAVSettingsRequest,
    NAVVolatility,
    PortfolioData,
    PriorNav,
)
