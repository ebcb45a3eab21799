"""Channel recommendation -- effectiveness reference data and channel scorer.

Provides the static ChannelEffectiveness table, category affinity
multipliers, per-category candidate lists, and ChannelScorer which scores,
explains, recommends and ranks external resolution channels.
"""
