from datetime import datetime
from typing import Optional

# eBird emits local times as "YYYY-MM-DD HH:MM", sometimes date only
_EBIRD_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d")

def parse_obs_dt(s: str | None) -> Optional[datetime]:
    if not s:
        return None
    for fmt in _EBIRD_FORMATS:
        try:
            return datetime.strptime(s.strip(), fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None

def clean_obs_dt(s) -> Optional[str]:
    """Keeps a timestamp string only when it parses; display-only field."""
    if not isinstance(s, str):
        return None
    return s.strip() if parse_obs_dt(s) else None
