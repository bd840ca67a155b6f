"""
Decision Layer - What to do.

Contains:
- RuleEngine: ordered first-match rule table
- default_rules: the wall-following table built from Parameters
"""

from .rules import STOP, Rule, RuleEngine, VelocityCommand, default_rules

__all__ = ["STOP", "Rule", "RuleEngine", "VelocityCommand", "default_rules"]
