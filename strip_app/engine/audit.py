"""Timestamped audit trail of the operations applied during an editing session."""

from datetime import datetime
import platform

def start_audit() -> list[str]:
    return [f"Session start: {datetime.now().isoformat()}",
            f"Platform: {platform.platform()}" ]

def log_step(audit: list[str], msg: str):
    audit.append(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}")
