import gzip
import typing as t
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base with a UUID key and creation/update timestamps.

    ``save()`` runs ``full_clean()``, so model validation errors surface as
    ``ValidationError`` before anything reaches the database.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.full_clean()
        super().save(*args, **kwargs)


class EmailLog(TimeStampedModel):
    """One row per recipient of every email sent. Bodies are stored gzip-compressed."""

    to = models.EmailField(db_index=True)
    subject = models.TextField()
    sent_at = models.DateTimeField(auto_now_add=True, db_index=True)
    compressed_body = models.BinaryField(null=True, blank=True)

    class Meta:
        ordering = ["-sent_at"]
        indexes = [
            models.Index(fields=["to", "sent_at"], name="ix_emaillog_to_sentat"),
        ]

    def __str__(self) -> str:
        return f"Email to: {self.to}"

    @property
    def body(self) -> str | None:
        if self.compressed_body:
            return gzip.decompress(self.compressed_body).decode()
        return None

    @body.setter
    def body(self, value: str | None) -> None:
        self.compressed_body = gzip.compress(value.encode()) if value else None
