"""FinanceAI: personal finance tracking with an AI advisor"""

__version__ = "1.0.0"
