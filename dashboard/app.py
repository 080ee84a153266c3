"""Streamlit dashboard application.

Operator console for the railway safety monitor: live camera feed, the
latest pilot directive, simulated track telemetry, the incident history
chart and the alert list. Run it with::

    streamlit run dashboard/app.py

The monitoring loop itself runs on a background thread (see
`console.runner.ConsoleRunner`) shared by every browser session; this page
only renders snapshots of it and forwards the operator's button presses.
Buzzer clips are played in the browser once the operator has interacted
with the page, mirroring browser autoplay rules.
"""

from __future__ import annotations

import atexit
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import cv2
import streamlit as st

# Streamlit puts only this file's directory on sys.path.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alarms.buzzer import AudioOutput, ClipQueueOutput  # noqa: E402
from analytics.alert_stats import alerts_frame, counts_by_category, counts_by_severity  # noqa: E402
from analytics.history import history_frame  # noqa: E402
from console.config import load_config  # noqa: E402
from console.coordinator import ConsoleMode, ConsoleSnapshot, MonitoringConsole  # noqa: E402
from console.runner import ConsoleRunner  # noqa: E402
from telemetry.state import AlertRecord  # noqa: E402

REFRESH_SECONDS = 1.0


@st.cache_resource
def get_runner() -> ConsoleRunner:
    """Start the shared console once per server process."""
    config = load_config()
    console = MonitoringConsole.from_config(config, output_factory=ClipQueueOutput)
    runner = ConsoleRunner(console).start_and_wait()
    atexit.register(runner.shutdown)
    return runner


def on_toggle(runner: ConsoleRunner) -> None:
    st.session_state["audio_primed"] = True
    runner.toggle()


def on_analyze(runner: ConsoleRunner) -> None:
    st.session_state["audio_primed"] = True
    runner.analyze_now()


def on_enable_audio(runner: ConsoleRunner) -> None:
    st.session_state["audio_primed"] = True
    runner.prime_audio()


def render_header(runner: ConsoleRunner, snap: ConsoleSnapshot) -> None:
    left, right = st.columns([3, 1])
    with left:
        st.title("SafeRail Vision")
        st.caption("AUTONOMOUS SAFETY MONITORING SYSTEM v3.2 · ID: RLY-9942-EXP")
    with right:
        active = snap.mode is ConsoleMode.ACTIVE
        st.markdown(f"**{'🟢 System Active' if active else '⚪ Maintenance Mode'}**")
        st.button(
            "Emergency Halt Simulation" if active else "Resume Monitoring",
            type="secondary" if active else "primary",
            on_click=on_toggle,
            args=(runner,),
        )


def render_feed(runner: ConsoleRunner, snap: ConsoleSnapshot) -> None:
    st.subheader("Live Track Feed")
    frame = runner.console.grabber.grab() if runner.console.grabber else None
    if frame is None:
        st.info("Camera feed unavailable.")
    else:
        st.image(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB), width="stretch")
    if snap.analyzing:
        st.caption("⏳ Analysing frame...")
    st.markdown(f"> {snap.directive}")


def render_telemetry(snap: ConsoleSnapshot) -> None:
    status = snap.status
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Intrusion Status", "WARNING" if status.intrusion_detected else "CLEAR")
    c2.metric("Fog Density", f"{status.fog_level:.1f} %")
    c3.metric("Visibility", f"{status.visibility:.1f} %")
    c4.metric("Train Speed", f"{status.speed:.0f} km/h")

    st.write(f"Track integrity: **{status.track_health:.1f}%**")
    st.progress(min(100, max(0, int(status.track_health))))
    st.write(f"Fog level: **{status.fog_level:.1f}%**" + (" ⚠️" if status.fog_level > 60 else ""))
    st.progress(min(100, max(0, int(status.fog_level))))


def render_analysis(snap: ConsoleSnapshot) -> None:
    st.subheader("Remote Analysis")
    result = snap.last_analysis
    if result is None:
        st.write("No analysis received yet.")
        return
    st.write(f"Hazard probability: **{result.hazard_probability:.0f}%**")
    st.write(result.assessment)
    if result.detected_objects:
        st.write("Detected objects: " + ", ".join(result.detected_objects))
    for rec in result.recommendations:
        st.markdown(f"- {rec}")


def alert_summary(alerts: Sequence[AlertRecord]) -> str:
    """One-line breakdown of the alerts by severity, then category."""
    parts = [f"{k}: {v}" for k, v in sorted(counts_by_severity(alerts).items())]
    parts += [f"{k}: {v}" for k, v in sorted(counts_by_category(alerts).items())]
    return " · ".join(parts)


def render_alerts(snap: ConsoleSnapshot) -> None:
    st.subheader(f"Alerts ({len(snap.alerts)})")
    if not snap.alerts:
        st.write("No alerts raised.")
        return
    st.caption(alert_summary(snap.alerts))
    st.dataframe(alerts_frame(snap.alerts), hide_index=True, width="stretch")


def pending_clips(output: Optional[AudioOutput], primed: bool) -> List[bytes]:
    """Clips this session should play.

    The clip queue is shared by every browser session, so a session that has
    not been unlocked by a user gesture leaves the clips for one that has.
    """
    if not primed or not isinstance(output, ClipQueueOutput):
        return []
    return output.drain()


def play_buzzer(runner: ConsoleRunner) -> None:
    primed = bool(st.session_state.get("audio_primed"))
    for clip in pending_clips(runner.console.emitter.output, primed):
        st.audio(clip, format="audio/wav", autoplay=True)


def main() -> None:
    """Main entry point for the Streamlit dashboard."""
    st.set_page_config(page_title="SafeRail Vision", layout="wide")
    runner = get_runner()

    st.sidebar.header("Controls")
    st.sidebar.button("Enable buzzer", on_click=on_enable_audio, args=(runner,))
    st.sidebar.button("Run analysis now", on_click=on_analyze, args=(runner,))

    @st.fragment(run_every=REFRESH_SECONDS)
    def live() -> None:
        snap = runner.snapshot()
        render_header(runner, snap)
        feed_col, side_col = st.columns([2, 1])
        with feed_col:
            render_feed(runner, snap)
            render_telemetry(snap)
            st.subheader("Incident History")
            st.line_chart(history_frame(snap.history))
        with side_col:
            render_analysis(snap)
            render_alerts(snap)
        play_buzzer(runner)

    live()


if __name__ == "__main__":
    main()
