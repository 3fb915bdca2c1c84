"""Composition root for the save subsystem."""

import structlog

from saves.service import SaveService
from saves.session_intent import FileSessionIntent
from saves.settings import SaveSettings
from saves.store import SlotStore
from shared.logging import setup_logging

logger = structlog.get_logger()


def create_save_service(settings: SaveSettings | None = None) -> SaveService:
    """Build the slot store, session intent and facade from settings."""
    if settings is None:
        settings = SaveSettings()

    store = SlotStore(settings.save_dir, secret_key=settings.secret_key)
    try:
        store.ensure_directory()
    except OSError:
        # save() retries directory creation and reports failures per call.
        logger.exception("could not create save directory", path=settings.save_dir)

    return SaveService(
        store,
        FileSessionIntent(settings.prefs_file),
        slot_count=settings.slot_count,
    )


def get_save_service() -> SaveService:
    """Entry point for the host application: configure logging, then build the service."""
    settings = SaveSettings()
    setup_logging(log_dir=settings.log_dir)
    service = create_save_service(settings=settings)
    logger.info("save service ready", save_dir=settings.save_dir, slots=settings.slot_count)
    return service
