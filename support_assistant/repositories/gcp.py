"""Google Cloud Platform implementations of repositories."""

from google.cloud import secretmanager  # type: ignore[attr-defined]

from ..structured_logging import get_logger
from .base import BaseSecretRepository

logger = get_logger("GCP_SECRETS")


class GCPSecretRepository(BaseSecretRepository):
    """GCP Secret Manager implementation. Secrets are named ``{client_id}-{suffix}``."""

    def __init__(self, client_id: str, project_id: str):
        self._client = secretmanager.SecretManagerServiceClient()
        self._project_id = project_id
        self._client_id = client_id

    def access_secret(self, secret_suffix: str) -> str:
        path = self._client.secret_version_path(
            project=self._project_id, secret=self.build_secret_name(secret_suffix), secret_version="latest"
        )

        response = self._client.access_secret_version(name=path)
        logger.info("Retrieved secret", path=path)
        return response.payload.data.decode("UTF-8")  # type: ignore[no-any-return]

    def build_secret_name(self, secret_suffix: str) -> str:
        return self._client_id + "-" + secret_suffix
