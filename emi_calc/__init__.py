"""Home-loan EMI planner: amortization with rate changes, part payments and staged disbursement."""

__version__ = "0.1.0"
