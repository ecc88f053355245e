import typing as t
import uuid

from django.db import models
from django.utils.text import slugify

from common.models import TimeStampedModel


class OrganizationQuerySet(models.QuerySet["Organization"]):
    def active(self) -> t.Self:
        """Organizations open for business."""
        return self.filter(is_active=True)

    def by_identifier(self, identifier: str) -> t.Self:
        """Match an organization by slug, web URL or id."""
        q = models.Q(slug=identifier) | models.Q(web_url=identifier)
        try:
            q |= models.Q(id=uuid.UUID(identifier))
        except ValueError:
            pass
        return self.filter(q)


class Organization(TimeStampedModel):
    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True)
    web_url = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Public web address used by the registration form, e.g. sample-charity.org",
    )
    description = models.TextField(blank=True)
    contact_email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    objects = OrganizationQuerySet.as_manager()

    class Meta:
        ordering = ["name"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Derive the slug from the name when missing."""
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name
