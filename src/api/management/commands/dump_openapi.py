"""Write the OpenAPI schema of the Kinship API to a JSON file."""

import json
import typing as t
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandParser
from ninja.responses import NinjaJSONEncoder

from api.api import api


class Command(BaseCommand):
    help = "Write the OpenAPI schema to a JSON file, for client generation."

    def add_arguments(self, parser: CommandParser) -> None:
        """Add the output path argument."""
        parser.add_argument(
            "--output",
            type=Path,
            default=settings.BASE_DIR.parent / ".artifacts" / "openapi.json",
            help="Where to write the schema. Defaults to .artifacts/openapi.json at the repository root.",
        )

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Render the schema and write it."""
        output_file: Path = options["output"]
        output_file.parent.mkdir(parents=True, exist_ok=True)
        schema = api.get_openapi_schema()
        output_file.write_text(json.dumps(schema, indent=2, cls=NinjaJSONEncoder))
        paths = len(schema["paths"])
        self.stdout.write(self.style.SUCCESS(f"OpenAPI schema with {paths} paths written to {output_file}"))
