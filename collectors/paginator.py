"""Offset/limit pagination over a GraphQL root field."""

from typing import Any, Dict, Iterator, List, Optional

from tqdm import tqdm

import config


def fetch_pages(
    client,
    document: str,
    root_field: str,
    variables: Optional[Dict[str, Any]] = None,
    page_size: int = config.PAGE_SIZE,
    progress: bool = False,
    desc: Optional[str] = None,
) -> Iterator[List[dict]]:
    """Yield pages of ``root_field`` rows at offsets 0, N, 2N, ...

    Stops after the first page shorter than ``page_size``; an empty first
    page yields nothing. Pages are requested strictly one after another and
    the next request is only issued once the caller has consumed the current
    page. Errors from ``client.query`` propagate unchanged: a failed fetch
    must be restarted from offset 0.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    offset = 0
    pbar = tqdm(desc=desc or f"Fetching {root_field}", unit=" rows", disable=not progress)
    try:
        while True:
            params = dict(variables or {})
            params["limit"] = page_size
            params["offset"] = offset

            data = client.query(document, params)
            rows = data.get(root_field) or []

            if rows:
                pbar.update(len(rows))
                yield rows

            if len(rows) < page_size:
                break

            offset += page_size
    finally:
        pbar.close()


def fetch_all(
    client,
    document: str,
    root_field: str,
    variables: Optional[Dict[str, Any]] = None,
    page_size: int = config.PAGE_SIZE,
) -> List[dict]:
    """Collect every row of a paginated query into one list."""
    rows: List[dict] = []
    for page in fetch_pages(client, document, root_field, variables, page_size):
        rows.extend(page)
    return rows
