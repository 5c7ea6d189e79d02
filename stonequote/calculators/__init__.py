"""
Deterministic pricing calculators.

Pure Python math. Given a PieceSpec and the rate catalog, each calculator
produces one section of the PiecePricingBreakdown; pricing_engine.py
composes them.
"""
