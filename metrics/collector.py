"""
Metrics Collector for kitchen simulation runs
Turns the action log into tables and summary statistics
"""

import json
import pandas as pd
from typing import Dict, List, Any
from pathlib import Path
from datetime import datetime
import logging

from kitchen.actions import ActionRecord
from kitchen_types import ActionKind, StorageLocation

logger = logging.getLogger(__name__)

ACTION_COLUMNS = ["timestamp", "order_id", "action", "target", "reason"]


class MetricsCollector:
    """Collect and analyze kitchen action logs"""

    def __init__(self, output_dir: str = "data/metrics"):
        self.output_dir = Path(output_dir)

    @staticmethod
    def actions_frame(actions: List[ActionRecord]) -> pd.DataFrame:
        """One row per action, in log order"""
        rows = [
            {
                "timestamp": record.timestamp,
                "order_id": record.order_id,
                "action": record.action.value,
                "target": record.target.value,
                "reason": record.reason,
            }
            for record in actions
        ]
        return pd.DataFrame(rows, columns=ACTION_COLUMNS)

    def summarize(self, actions: List[ActionRecord]) -> Dict[str, Any]:
        """Counts per action and target, discard causes and waste ratio"""
        df = self.actions_frame(actions)

        by_action = df["action"].value_counts().to_dict()
        counts = {kind.value: int(by_action.get(kind.value, 0)) for kind in ActionKind}

        placements = df[df["action"] == ActionKind.PLACE.value]
        by_target = placements["target"].value_counts().to_dict()
        placed_by_target = {loc.value: int(by_target.get(loc.value, 0)) for loc in StorageLocation}

        discards = df[df["action"] == ActionKind.DISCARD.value]
        reasons = discards["reason"].fillna("")
        expired = int(reasons.str.startswith("expired").sum())
        overflow = int(len(discards) - expired)

        placed = counts[ActionKind.PLACE.value]
        summary = {
            "total_actions": int(len(df)),
            "orders_seen": int(df["order_id"].nunique()),
            "actions": counts,
            "placed_by_target": placed_by_target,
            "discarded_expired": expired,
            "discarded_overflow": overflow,
            "waste_ratio": round(counts[ActionKind.DISCARD.value] / placed, 4) if placed else 0.0,
        }

        if not df.empty:
            span = df["timestamp"].max() - df["timestamp"].min()
            summary["duration_seconds"] = round(span.total_seconds(), 3)

        return summary

    def export_to_csv(self, actions: List[ActionRecord], name: str = "actions") -> Path:
        """Export the action log to a CSV file"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        self.actions_frame(actions).to_csv(filepath, index=False)
        logger.info(f"Exported {len(actions)} actions to {filepath}")
        return filepath

    def export_summary(self, summary: Dict[str, Any], name: str = "summary") -> Path:
        """Save a run summary as JSON"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filepath, 'w') as f:
            json.dump(summary, f, indent=2, default=str)
        logger.info(f"Saved run summary to {filepath}")
        return filepath
