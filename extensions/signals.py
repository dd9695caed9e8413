from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Extension
from .runtime import invalidate_descriptor


@receiver(post_save, sender=Extension)
@receiver(post_delete, sender=Extension)
def extension_changed(sender, instance, **kwargs):
    invalidate_descriptor(instance)
