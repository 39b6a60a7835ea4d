from __future__ import annotations

from typing import Any

from krystal.http import HttpClient


async def get_protocols(http: HttpClient) -> Any:
    return await http.get_json(http.build_url("/v1/protocols"))
