"""Rules package.

This package decides when the console raises an alert. Two rules exist:
the intrusion rule applied to simulated telemetry and the hazard rule
applied to remote frame analyses. Thresholds are configured in the
``rules`` section of the YAML configuration.
"""

from .alert_rules import HazardRule, IntrusionRule

__all__ = ["HazardRule", "IntrusionRule"]
