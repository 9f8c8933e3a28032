"""
Verdict services: evaluation of a yes/no question and adversarial refutation of a prior verdict.
"""
