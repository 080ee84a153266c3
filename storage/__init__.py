"""Storage package.

The console keeps everything in memory; nothing survives a restart. This
package provides the bounded alert ledger shared by the telemetry and
analysis producers.
"""

from .alert_ledger import AlertLedger

__all__ = ["AlertLedger"]
