"""Link-health package — probe a URL and classify the outcome."""

from refhub.health.classifier import classify
from refhub.health.models import LinkStatus, StatusKind
from refhub.health.probe import build_client, probe_url

__all__ = ["classify", "probe_url", "build_client", "LinkStatus", "StatusKind"]
