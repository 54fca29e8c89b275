"""
Portfolio Renovation Advisor.

Batch energy/financial analysis of building portfolios and TOPSIS ranking of
renovation alternatives against stakeholder personas.
"""

__version__ = "0.1.0"
