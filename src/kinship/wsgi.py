"""WSGI config for Kinship."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "kinship.settings")

application = get_wsgi_application()
