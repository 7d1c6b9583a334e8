"""Server-wide configuration for the gSnake editor API.

Values are read from the environment once. ``load_settings()`` snapshots them
into an immutable ``Settings`` object that the app and clients receive at
construction time; changing the environment afterwards has no effect until
the process restarts.
"""

import os

from pydantic import BaseModel, ConfigDict

SERVICE_NAME = "gsnake-editor-api"
API_PORT = int(os.environ.get("API_PORT", "3001"))
TEST_LEVEL_TTL_SECONDS = 60 * 60  # Stored test levels expire after 1 hour
MIN_GRID_DIMENSION = 5            # Practical grid bounds for loaded files
MAX_GRID_DIMENSION = 50
DEFAULT_GRID_WIDTH = 10
DEFAULT_GRID_HEIGHT = 10
TEST_LEVEL_ID = 999999            # Fixed id used when uploading a level for testing
TEST_LEVEL_NAME = "Test Level"

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000,"
    "http://localhost:5173,"
    "http://127.0.0.1:3000,"
    "http://127.0.0.1:5173"
)


class Settings(BaseModel):
    """Startup snapshot of the environment-driven configuration."""
    model_config = ConfigDict(frozen=True)

    allowed_origins: tuple[str, ...]
    test_level_ttl_seconds: int = TEST_LEVEL_TTL_SECONDS
    api_url: str = f"http://localhost:{API_PORT}"
    game_url: str = "http://localhost:3000"
    sprites_url: str = "http://localhost:3000/sprites.svg"
    log_level: str = "INFO"


def parse_origins(raw: str) -> tuple[str, ...]:
    """Split a comma-separated origin list, dropping blanks and duplicates.

    Origins are compared by exact string match, so no normalisation beyond
    whitespace trimming is applied.
    """
    origins: list[str] = []
    for part in raw.split(","):
        origin = part.strip()
        if origin and origin not in origins:
            origins.append(origin)
    return tuple(origins)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Resolve settings from the environment (or an explicit mapping)."""
    env = os.environ if environ is None else environ
    return Settings(
        allowed_origins=parse_origins(env.get("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)),
        test_level_ttl_seconds=int(env.get("TEST_LEVEL_TTL_SECONDS", TEST_LEVEL_TTL_SECONDS)),
        api_url=env.get("EDITOR_API_URL", f"http://localhost:{API_PORT}"),
        game_url=env.get("GAME_URL", "http://localhost:3000"),
        sprites_url=env.get("SPRITES_URL", "http://localhost:3000/sprites.svg"),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
