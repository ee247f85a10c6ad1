# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pandas as pd

from ..core.results import FetchResult


def strip_link_keys(record: Dict[str, Any]) -> Dict[str, Any]:
    """Remove envelope metadata keys (keys starting with '@') from a record dict."""
    return {k: v for k, v in record.items() if not k.startswith("@")}


def fetch_result_to_dataframe(result: FetchResult) -> pd.DataFrame:
    """Flatten the dict items of a FetchResult into a DataFrame, one row per item.

    Nested objects become dotted columns (``address.city``). Non-dict items are ignored.
    """
    rows = [strip_link_keys(item) for item in result.items if isinstance(item, dict)]
    if not rows:
        return pd.DataFrame()
    return pd.json_normalize(rows)


def pages_to_dataframe(pages: Iterable[FetchResult]) -> pd.DataFrame:
    """Concatenate several pages into one DataFrame with a fresh index."""
    frames: List[pd.DataFrame] = [fetch_result_to_dataframe(page) for page in pages]
    frames = [f for f in frames if not f.empty]
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)
