import structlog
from django.apps import AppConfig

logger = structlog.get_logger(__name__)


class CommonConfig(AppConfig):
    """Configuration for the common app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "common"

    def ready(self) -> None:
        """Log the service identity once Django is fully loaded."""
        from django.conf import settings

        logger.debug(
            "app_ready",
            service=settings.SERVICE_NAME,
            version=settings.SERVICE_VERSION,
            environment=settings.DEPLOYMENT_ENVIRONMENT,
        )
