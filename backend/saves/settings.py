"""Save subsystem configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from saves.codec import SAVE_SECRET_KEY


class SaveSettings(BaseSettings):
    model_config = {"env_prefix": "SAVES_"}

    save_dir: str = Field(default="data/SaveFiles", min_length=1)
    prefs_file: str = Field(default="data/prefs.json", min_length=1)
    log_dir: str | None = None
    slot_count: int = Field(default=3, ge=1)

    # Defaults to the key baked into the build. Overriding it makes every save
    # written under the old key load as corrupted.
    secret_key: str = Field(default=SAVE_SECRET_KEY, min_length=1)
