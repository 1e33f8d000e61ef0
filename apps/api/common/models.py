# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    Abstract model that records creation / modification time.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BaseModel(TimestampModel):
    """
    Common base for every domain model.

    - timestamps included
    - room for soft-delete style extensions later
    """
    class Meta:
        abstract = True
