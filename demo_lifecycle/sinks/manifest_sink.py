"""File-based sink recording which remote ids a provisioning run created."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

logger = logging.getLogger("demo_lifecycle.manifest")


class FileManifestSink:
    def __init__(self, root: str):
        self.root = root

    def path_for(self, run_id: str) -> str:
        return os.path.join(self.root, f"{run_id}.json")

    def write(self, run_id: str, created: Dict[str, List[int]]) -> str:
        os.makedirs(self.root, exist_ok=True)
        path = self.path_for(run_id)
        record = {
            "run_id": run_id,
            "updated_at": datetime.now().isoformat(timespec="seconds"),
            **created,
        }
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(record, fh, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
        return path


class LoggingSink:
    def write(self, run_id: str, created: Dict[str, List[int]]) -> Optional[str]:
        counts = ", ".join(f"{name}={len(ids)}" for name, ids in created.items())
        logger.info("[MANIFEST] %s: %s", run_id, counts)
        return None


def load_manifest(root: str, run_id: str) -> Dict[str, List[int]]:
    """Read the manifest of ``run_id``; raises FileNotFoundError when none was written."""
    path = FileManifestSink(root).path_for(run_id)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Manifest not found for run {run_id}: {path}")
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return {
        name: [int(i) for i in data.get(name, [])]
        for name in ("organizations", "users", "tickets")
    }
