"""SafeRail Vision.

This package implements a railway safety-monitoring console: simulated
track telemetry, periodic remote frame analysis by a hosted Gemini model,
a bounded alert ledger with an audible buzzer, and a Streamlit dashboard.
See DESIGN.md for how the pieces fit together.
"""

__all__ = []
