"""Bootstrap an organization with its first administrator."""

import typing as t

from decouple import config
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from accounts.models import KinshipUser
from events.models import MemberProfile, Organization


class Command(BaseCommand):
    help = "Create an organization and its first administrator."

    def add_arguments(self, parser: t.Any) -> None:
        """Add command arguments."""
        parser.add_argument("--name", default=config("BOOTSTRAP_ORG_NAME", default="Sample Charity"))
        parser.add_argument("--slug", default=config("BOOTSTRAP_ORG_SLUG", default=""))
        parser.add_argument("--web-url", default=config("BOOTSTRAP_ORG_WEB_URL", default=None))
        parser.add_argument("--admin-email", default=config("BOOTSTRAP_ADMIN_EMAIL", default="admin@example.org"))
        parser.add_argument("--admin-password", default=config("BOOTSTRAP_ADMIN_PASSWORD", default="password"))

    @transaction.atomic
    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Create the organization and administrator unless they exist."""
        slug = options["slug"] or slugify(options["name"])
        organization, created = Organization.objects.get_or_create(
            slug=slug, defaults={"name": options["name"], "web_url": options["web_url"] or None}
        )
        if created:
            self.stdout.write(self.style.SUCCESS(f"Organization '{organization.name}' created."))
        else:
            self.stdout.write(self.style.WARNING(f"Organization '{organization.name}' already exists."))

        email = options["admin_email"].strip().lower()
        if KinshipUser.objects.filter(organization=organization, email=email).exists():
            self.stdout.write(self.style.WARNING(f"Administrator '{email}' already exists."))
            return
        if not options["admin_password"]:
            raise CommandError("An administrator password is required.")

        now = timezone.now()
        admin = KinshipUser.objects.create_org_user(
            organization,
            email,
            password=options["admin_password"],
            role=KinshipUser.Role.ORG_ADMIN,
            email_verified=True,
            email_verified_at=now,
        )
        MemberProfile.objects.create(
            user=admin,
            organization=organization,
            membership_status=MemberProfile.MembershipStatus.ACTIVE,
            approved_at=now,
            activated_at=now,
        )
        self.stdout.write(self.style.SUCCESS(f"Administrator '{email}' created."))
        if options["admin_password"] == "password":
            self.stdout.write(self.style.WARNING("The default password is being used. Please change it immediately."))
