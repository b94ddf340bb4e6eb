"""Docker Registry API v2 manifest client."""

import logging

import aiohttp

from ..exceptions import DeleteFailed, ManifestNotFound, RegistryConnectionError

logger = logging.getLogger(__name__)

MANIFEST_ACCEPT = ", ".join(
    [
        "application/vnd.oci.image.index.v1+json",
        "application/vnd.oci.image.manifest.v1+json",
        "application/vnd.docker.distribution.manifest.list.v2+json",
        "application/vnd.docker.distribution.manifest.v2+json",
    ]
)
DIGEST_HEADER = "Docker-Content-Digest"


class RegistryClient:
    """Async client for the manifest endpoints of an unauthenticated registry."""

    def __init__(
        self,
        registry_url: str,
        timeout: int = 30,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            registry_url: Registry URL (e.g., http://localhost:5000)
            timeout: Request timeout in seconds
            session: Shared aiohttp session; the client opens its own if omitted
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self._request_timeout = aiohttp.ClientTimeout(total=timeout)
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "RegistryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session if this client opened it."""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _manifest_url(self, repository: str, reference: str) -> str:
        return f"{self.registry_url}/v2/{repository}/manifests/{reference}"

    async def check_registry_v2(self) -> bool:
        """Check if the registry supports v2 API.

        Returns:
            True if v2 API is supported
        """
        try:
            async with self.session.get(
                f"{self.registry_url}/v2/", timeout=self._request_timeout
            ) as resp:
                return resp.status == 200
        except (aiohttp.ClientError, TimeoutError):
            return False

    async def resolve_digest(self, repository: str, tag: str) -> str:
        """Resolve a tag to its manifest digest.

        Args:
            repository: Repository name
            tag: Tag name

        Returns:
            Manifest digest from the Docker-Content-Digest header

        Raises:
            ManifestNotFound: If the manifest read fails or carries no digest
            RegistryConnectionError: If the registry cannot be reached
        """
        try:
            async with self.session.get(
                self._manifest_url(repository, tag),
                headers={"Accept": MANIFEST_ACCEPT},
                timeout=self._request_timeout,
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise ManifestNotFound(
                        f"Manifest {repository}:{tag} not found", status=resp.status
                    )
                digest = resp.headers.get(DIGEST_HEADER)
                if not digest:
                    raise ManifestNotFound(
                        f"Registry returned no {DIGEST_HEADER} for {repository}:{tag}",
                        status=resp.status,
                    )
                return digest

        except (aiohttp.ClientError, TimeoutError) as e:
            raise RegistryConnectionError(f"Failed to get manifest: {e}") from e

    async def delete_by_digest(self, repository: str, digest: str) -> None:
        """Delete a manifest by digest.

        Args:
            repository: Repository name
            digest: Manifest digest

        Raises:
            DeleteFailed: If the registry does not answer 202 Accepted
            RegistryConnectionError: If the registry cannot be reached
        """
        try:
            async with self.session.delete(
                self._manifest_url(repository, digest), timeout=self._request_timeout
            ) as resp:
                if resp.status != 202:
                    raise DeleteFailed(
                        f"Failed to delete manifest {repository}@{digest}",
                        status=resp.status,
                    )

        except (aiohttp.ClientError, TimeoutError) as e:
            raise RegistryConnectionError(f"Failed to delete manifest: {e}") from e
