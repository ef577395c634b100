from interpcal.optimization.end_criteria import EndCriteria, EndCriteriaType
from interpcal.optimization.levenberg_marquardt import LevenbergMarquardt, MinimizationResult
from interpcal.optimization.projection import Projection


__all__ = [
    "EndCriteria",
    "EndCriteriaType",
    "LevenbergMarquardt",
    "MinimizationResult",
    "Projection",
]
