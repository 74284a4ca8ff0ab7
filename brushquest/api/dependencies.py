"""
Shared service handles for the API routers.

main.py builds the services during startup and hands them over through
set_services(); routers read them with the getters below. Tests call
set_services() with fakes.
"""

from typing import Optional

from ..services.errors import ConfigurationError

# Global services (will be set by main app)
_settings = None
_db = None
_providers = None
_jobs = None
_media = None
_pipeline = None
_collectibles = None
_pets = None


def set_services(
    settings=None,
    db=None,
    providers=None,
    jobs=None,
    media=None,
    pipeline=None,
    collectibles=None,
    pets=None
):
    """Set the global service instances"""
    global _settings, _db, _providers, _jobs, _media, _pipeline, _collectibles, _pets
    _settings = settings
    _db = db
    _providers = providers
    _jobs = jobs
    _media = media
    _pipeline = pipeline
    _collectibles = collectibles
    _pets = pets


def _require(service, name: str):
    if service is None:
        raise ConfigurationError(f"{name} not initialized")
    return service


def get_settings_instance():
    return _require(_settings, "Settings")


def get_db():
    """Database service; unavailable when AZURE_SQL_* is not configured"""
    if _db is None:
        raise ConfigurationError("AZURE_SQL_SERVER not configured")
    return _db


def get_providers():
    return _require(_providers, "Providers")


def get_jobs():
    return _require(_jobs, "Job registry")


def get_media():
    return _require(_media, "Media service")


def get_pipeline():
    return _require(_pipeline, "Story pipeline")


def get_collectibles():
    return _require(_collectibles, "Collectible service")


def get_pets():
    return _require(_pets, "Pet service")


def has_db() -> bool:
    return _db is not None
