"""Minimal oasbind walkthrough.

Run ``uv run example.py`` to decode a sample request into a typed record and
print the result. The request mirrors a client listing endpoint that mixes an
imploded query list, a pipe-delimited id filter, a deep object filter, a path
parameter and a JSON body.
"""

from __future__ import annotations

import logging
from typing import Annotated

import msgspec

from oasbind import HTTPError, UInt32, decode, oas
from oasbind.testing import make_request


class Client(msgspec.Struct):
    id: int = 0
    name: str = ""


class Created(msgspec.Struct):
    after: Annotated[str, oas("gte")] = ""
    before: Annotated[str, oas("lt")] = ""


class ListClients(msgspec.Struct):
    tenant: Annotated[str, oas("tenant,path")] = ""
    filter_type: Annotated[list[str], oas("filterType,implode")] = []
    filter_client_ids: Annotated[list[UInt32], oas("filterClientIds,pipeDelimited")] = []
    client_id: Annotated[int, oas("clientId,required")] = 0
    created: Annotated[Created, oas(",deepObject")] = msgspec.field(default_factory=Created)
    client: Annotated[Client, oas(",body,json")] = msgspec.field(default_factory=Client)


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    request = make_request(
        "/tenants/acme/clients?filterType=pending,approved&clientId=4&filterClientIds=1|2|3"
        "&created[gte]=2024-01-01&created[lt]=2025-01-01",
        method="POST",
        path_params={"tenant": "acme"},
        json={"id": 1, "name": "Widget"},
    )
    try:
        params = decode(request, ListClients())
    except HTTPError as exc:
        print(exc.to_response_body().decode())
        return
    print(params)


if __name__ == "__main__":
    main()
