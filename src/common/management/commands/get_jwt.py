"""Get JWT tokens for a specific user by email."""

import typing as t

from django.core.management.base import BaseCommand, CommandError

from accounts.models import KinshipUser
from accounts.service.auth import get_token_pair_for_user
from events.models import Organization


class Command(BaseCommand):
    """Get JWT access and refresh tokens for a specific user."""

    help = "Get JWT access and refresh tokens for a specific user by email."

    def add_arguments(self, parser: t.Any) -> None:
        """Add command arguments."""
        parser.add_argument("email", type=str, help="Email address of the user")
        parser.add_argument("--organization", type=str, default=None, help="Organization slug, web address or id")

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Generate JWT tokens for the specified user."""
        users = KinshipUser.objects.filter(email=options["email"].strip().lower())
        if options["organization"]:
            users = users.filter(organization__in=Organization.objects.by_identifier(options["organization"]))
        matches = list(users[:2])
        if not matches:
            raise CommandError(f'User with email "{options["email"]}" does not exist')
        if len(matches) > 1:
            raise CommandError("The email exists in several organizations. Pass --organization.")

        user = matches[0]
        tokens = get_token_pair_for_user(user)

        self.stdout.write(self.style.SUCCESS(f"\nJWT Tokens for: {user.email}"))
        self.stdout.write(self.style.SUCCESS(f"User ID: {user.id}"))
        self.stdout.write(self.style.SUCCESS(f"Role: {user.role}"))
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("Access Token:"))
        self.stdout.write(tokens.access)
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("Refresh Token:"))
        self.stdout.write(tokens.refresh)
        self.stdout.write("")
