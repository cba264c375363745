"""
Domain models — Pydantic types for the reactor and the check settings.

All models are re-exported here for convenient access:

    from snapguard.core.models import Project, Profile, Plugin, Dependency
"""

from snapguard.core.models.build import (
    DEFAULT_PLUGIN_GROUP,
    BuildConfiguration,
    Dependency,
    Plugin,
    PluginIdentity,
)
from snapguard.core.models.project import PluginSurfaces, Profile, Project
from snapguard.core.models.settings import Settings

__all__ = [
    # build.py
    "BuildConfiguration",
    "DEFAULT_PLUGIN_GROUP",
    "Dependency",
    "Plugin",
    "PluginIdentity",
    # project.py
    "PluginSurfaces",
    "Profile",
    "Project",
    # settings.py
    "Settings",
]
