"""In-memory stand-ins for the query service, the balance reader and HTTP sessions."""

import json
from typing import Any, Callable, Dict, List, Optional

import requests

# GraphQL variable -> ledger column it filters with _eq
EQ_FILTERS = {
    "userAddress": "user_address",
    "marketAddress": "market_address",
    "tokenId": "token_id",
}


class FakeGraphQLClient:
    """In-memory query service: canned rows per document, sliced by offset/limit.

    Rows are served in the order given, so tests decide what the query
    layer's ordering and distinct-on would have produced.
    """

    def __init__(self):
        self.views: Dict[str, tuple] = {}
        self.calls: List[tuple] = []
        self.fail_on_call: Optional[int] = None

    def serve(self, document: str, root_field: str, rows: List[dict],
              where: Optional[Callable[[dict], bool]] = None) -> "FakeGraphQLClient":
        self.views[document] = (root_field, rows, where)
        return self

    def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        variables = dict(variables or {})
        self.calls.append((document, variables))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise requests.exceptions.ConnectionError("query service unreachable")

        root_field, rows, where = self.views[document]
        if where is not None:
            rows = [r for r in rows if where(r)]
        for var, column in EQ_FILTERS.items():
            if var in variables:
                rows = [r for r in rows if str(r.get(column)) == str(variables[var])]

        offset, limit = variables["offset"], variables["limit"]
        return {root_field: [dict(r) for r in rows[offset:offset + limit]]}

    def calls_for(self, document: str) -> List[dict]:
        return [v for d, v in self.calls if d == document]


class FakeBalanceReader:
    def __init__(self, balances: Optional[Dict[str, int]] = None, fail: bool = False):
        self.balances = balances or {}
        self.fail = fail
        self.batches: List[List[str]] = []

    def get_balance(self, address: str) -> int:
        if self.fail:
            raise requests.exceptions.ConnectionError("rpc down")
        return self.balances.get(address, 0)

    def get_balances(self, addresses: List[str]) -> Dict[str, Optional[int]]:
        self.batches.append(list(addresses))
        if self.fail:
            raise requests.exceptions.ConnectionError("rpc down")
        return {a: self.balances.get(a) for a in addresses}


def scripted_response(status: int, body: Any = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode()
    resp.url = "http://service.test/"
    return resp


class ScriptedSession(requests.Session):
    """Session that replays canned responses (or raises canned exceptions)."""

    def __init__(self, *script):
        super().__init__()
        self.script = list(script)
        self.posts: List[Any] = []

    def post(self, url, json=None, timeout=None, **kwargs):
        self.posts.append(json)
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step
