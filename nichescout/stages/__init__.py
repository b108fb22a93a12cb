"""Import all stages to trigger registration."""

from nichescout.stages.s1_market_discovery import MarketDiscoveryStage  # noqa: F401
from nichescout.stages.s2_research import ResearchStage  # noqa: F401
from nichescout.stages.s3_pain_point_analysis import PainPointAnalysisStage  # noqa: F401
from nichescout.stages.s4_strategy import StrategyStage  # noqa: F401
