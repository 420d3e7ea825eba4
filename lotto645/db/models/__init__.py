"""ORM models package."""

from lotto645.db.models.draw import LottoDraw
from lotto645.db.models.number_stat import NumberStatRecord, ReappearStatRecord
from lotto645.db.models.bayesian_stat import BayesianStat
from lotto645.db.models.analysis_stat import AnalysisStat

__all__ = [
    "LottoDraw",
    "NumberStatRecord",
    "ReappearStatRecord",
    "BayesianStat",
    "AnalysisStat",
]
