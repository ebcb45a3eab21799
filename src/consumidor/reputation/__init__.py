"""Company reputation -- calculator, category ranking, and orchestration service.

Provides ReputationCalculator (pure scoring over a complaint history),
CategoryRankingAggregator (peer cohort ranking), and ReputationService which
fetches from the complaint store and optionally persists snapshots.
"""
