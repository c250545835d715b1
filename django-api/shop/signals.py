"""Django signals for cache invalidation."""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from shop.models import SettingsDocument
from shop.services.settings_service import SETTINGS_CACHE_KEY, SITE_SETTINGS_KEY


@receiver([post_save, post_delete], sender=SettingsDocument)
def invalidate_settings_cache(sender, instance, **kwargs):
    """Drop the cached site settings when the document is written or removed."""
    if instance.key == SITE_SETTINGS_KEY:
        cache.delete(SETTINGS_CACHE_KEY)
