# fitquest/common/io_utils.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd


def read_csv(path: Path, **kwargs) -> pd.DataFrame:
    return pd.read_csv(path, **kwargs)


def write_csv(df: pd.DataFrame, path: Path, mode: str = "w", header: Optional[bool] = None) -> None:
    """Append or overwrite; the header is written only when the file starts fresh."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if header is None:
        header = mode == "w" or not path.exists() or path.stat().st_size == 0
    df.to_csv(path, index=False, mode=mode, header=header)


def read_json(path: Path) -> Optional[Dict[str, Any]]:
    text = Path(path).read_text(encoding="utf-8")
    return json.loads(text) if text.strip() else None


def write_json(data: Dict[str, Any], path: Path) -> None:
    """Atomic: the document lands in <name>.tmp and is renamed over the target."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True), encoding="utf-8")
    tmp.replace(path)
