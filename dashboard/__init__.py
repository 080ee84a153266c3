"""Dashboard package.

The dashboard is the operator's view of the monitoring console: camera
feed, telemetry, directive, incident history and alerts. It is built with
Streamlit in `app.py`; start it with ``streamlit run dashboard/app.py``
from the repository root.
"""
