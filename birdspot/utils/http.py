# birdspot/utils/http.py
import httpx
from typing import Optional

async def get_json(url: str, headers: Optional[dict] = None, params: Optional[dict] = None, timeout: float = 30.0):
    async with httpx.AsyncClient(timeout=timeout) as client:
        r = await client.get(url, headers=headers, params=params)
        r.raise_for_status()
        return r.json()
