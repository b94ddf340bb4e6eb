"""Registry operations built on the manifest client."""

import logging

from .core.registry_client import RegistryClient

logger = logging.getLogger(__name__)


async def delete_image(client: RegistryClient, repository: str, tag: str) -> str:
    """Delete a tagged image from the registry.

    Resolves the tag to its manifest digest and deletes the manifest by
    digest. The two requests are independent: a tag re-pushed between them
    is not detected.

    Args:
        client: Open registry client
        repository: Repository name (e.g., "nginx", "mycompany/myapp")
        tag: Tag name (e.g., "latest")

    Returns:
        The digest of the deleted manifest

    Raises:
        ManifestNotFound: If the tag cannot be resolved
        DeleteFailed: If the registry rejects the delete
        RegistryConnectionError: If the registry cannot be reached

    Note:
        The registry must run with REGISTRY_STORAGE_DELETE_ENABLED=true.
        Deleting by digest removes every tag pointing at the same manifest.
    """
    digest = await client.resolve_digest(repository, tag)
    await client.delete_by_digest(repository, digest)
    logger.info("Deleted %s:%s (%s)", repository, tag, digest)
    return digest
