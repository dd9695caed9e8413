from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.core.cache import cache

from core.models import Menu

from .models import Extension
from .validation import ExtensionCompileError

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "extension-descriptor"


def descriptor_cache_key(extension: Extension) -> str:
    return f"{CACHE_KEY_PREFIX}:{extension.pk}"


def resolve_page(path: str) -> Optional[Extension]:
    """Return the enabled Page extension linked to the menu at ``path``."""
    normalized = Menu.normalize_path(path)
    menu = Menu.objects.filter(path=normalized, is_enabled=True).select_related("extension").first()
    if menu is None:
        return None
    try:
        extension = menu.extension
    except Extension.DoesNotExist:
        return None
    if not extension.is_enabled or not extension.is_page:
        return None
    return extension


def get_widget(pk) -> Optional[Extension]:
    try:
        pk = int(pk)
    except (TypeError, ValueError):
        return None
    return Extension.objects.filter(pk=pk, type=Extension.TYPE_WIDGET, is_enabled=True).first()


def get_descriptor(extension: Extension) -> dict:
    """Compiled descriptor for ``extension``, served from the cache when possible."""
    key = descriptor_cache_key(extension)
    try:
        cached = cache.get(key)
    except Exception:
        logger.warning("Extension cache unavailable reading %s", key, exc_info=True)
        cached = None
    if cached is not None and cached.get("checksum") == extension.checksum:
        return cached

    descriptor = extension.compiled
    if not descriptor or descriptor.get("checksum") != extension.checksum:
        try:
            descriptor = extension.compile()
        except ExtensionCompileError:
            logger.exception("Extension %s pk=%s failed to compile", extension.extension_id, extension.pk)
            raise
        Extension.objects.filter(pk=extension.pk).update(
            compiled=extension.compiled,
            checksum=extension.checksum,
            compiled_at=extension.compiled_at,
        )

    try:
        cache.set(key, descriptor, timeout=getattr(settings, "EXTENSION_CACHE_TIMEOUT", 3600))
    except Exception:
        logger.warning("Extension cache unavailable writing %s", key, exc_info=True)
    return descriptor


def invalidate_descriptor(extension: Extension) -> None:
    try:
        cache.delete(descriptor_cache_key(extension))
    except Exception:
        logger.warning("Could not invalidate cached descriptor for %s", extension.pk, exc_info=True)


def extension_json(extension: Extension, *, include_descriptor: bool = True) -> dict:
    data = {
        "id": extension.pk,
        "extension_id": extension.extension_id,
        "name": extension.name,
        "type": extension.type,
        "version": extension.version,
        "description": extension.description,
        "menu": extension.menu.path if extension.menu_id else None,
        "updated_at": extension.updated_at.isoformat() if extension.updated_at else None,
    }
    if include_descriptor:
        data["descriptor"] = get_descriptor(extension)
    return data
