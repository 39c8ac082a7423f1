
"""JSON and CSV exports of scenario results."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import pandas as pd
from .utils import ScenarioInput, ScenarioOutput

logger = logging.getLogger(__name__)


def scenario_report(region: str, scenario: str, p: ScenarioInput, out: ScenarioOutput,
                    timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    ts = timestamp or datetime.now(timezone.utc)
    return {
        'region': region,
        'scenario': scenario,
        'inputs': p.to_dict(),
        'outputs': out.to_dict(),
        'timestamp': ts.isoformat(),
    }


def report_to_json(report: Dict[str, Any]) -> bytes:
    return json.dumps(report, indent=2, ensure_ascii=False).encode('utf-8')


def rows_to_csv(rows: List[Dict]) -> bytes:
    return pd.DataFrame(rows).to_csv(index=False).encode('utf-8')


def export_filename(kind: str, region: str, scenario: str, ext: str,
                    when: Optional[datetime] = None) -> str:
    day = (when or datetime.now(timezone.utc)).strftime('%Y-%m-%d')
    name = f"{kind}-{region}-{scenario}-{day}.{ext}"
    logger.info('export file %s', name)
    return name
