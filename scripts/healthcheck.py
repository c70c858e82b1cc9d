"""
Container health check for the price ingestion API.

Exits 0 when ``GET /health`` answers with a 2xx/3xx status.
"""

from __future__ import annotations

import os
import sys
from urllib.error import URLError
from urllib.request import urlopen


def main() -> int:
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    timeout = float(os.getenv("HEALTHCHECK_TIMEOUT_SECONDS", "2"))
    url = f"http://127.0.0.1:{port}{path}"

    try:
        with urlopen(url, timeout=timeout) as response:
            healthy = 200 <= response.status < 400
    except (URLError, TimeoutError, ValueError) as exc:
        print(f"unhealthy: {url}: {exc}", file=sys.stderr)
        return 1
    return 0 if healthy else 1


if __name__ == "__main__":
    raise SystemExit(main())
