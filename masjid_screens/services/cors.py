import os
from dataclasses import dataclass, field

ALLOWED_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
ALLOWED_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, Content-MD5, "
    "Content-Type, Date, X-Api-Version, Authorization, X-Screen-ID"
)
DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://localhost:3001"


def parse_origin_table(raw: str) -> dict[str, bool]:
    # "https://a.example,!https://b.example" allows a, denies b.
    table: dict[str, bool] = {}
    for entry in raw.split(","):
        value = entry.strip()
        if not value:
            continue
        allowed = not value.startswith("!")
        table[value.lstrip("!").strip().rstrip("/")] = allowed
    return table


def _origins_from_env() -> dict[str, bool]:
    return parse_origin_table(os.getenv("MASJID_CORS_ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS))


@dataclass(frozen=True)
class CorsPolicy:
    """Origin table for browser-hosted display front-ends.

    Listed origins are echoed back and may send credentials. Origins mapped
    to False are refused outright. Anything else, including native players
    that send no Origin at all, falls back to ``*`` without credentials.
    """

    origins: dict[str, bool] = field(default_factory=_origins_from_env)

    def headers_for(self, origin: str | None) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Vary": "Origin",
        }
        normalized = (origin or "").strip().rstrip("/")
        decision = self.origins.get(normalized) if normalized else None
        if decision is True:
            headers["Access-Control-Allow-Origin"] = normalized
            headers["Access-Control-Allow-Credentials"] = "true"
        elif decision is None:
            headers["Access-Control-Allow-Origin"] = "*"
        return headers
