"""File-backed store for the last migrated submission id."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


class WatermarkStore:
    """
    Persists the highest legacy submission id already migrated.

    The state file is a small JSON document shared by every form of the
    legacy system; a missing file means nothing was migrated yet.
    """

    def __init__(self, state_file: str):
        self.path = Path(state_file)

    def read(self) -> int:
        """Get the last migrated submission id (0 when none)."""
        if not self.path.exists():
            return 0

        with open(self.path, 'r') as f:
            data = json.load(f)

        return int(data.get("last_submission_id", 0) or 0)

    def write(self, submission_id: int) -> None:
        """Record the last migrated submission id."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "last_submission_id": int(submission_id),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        with open(self.path, 'w') as f:
            json.dump(data, f, indent=2)
        logger.info(f"Set last imported submission id to {submission_id}")
