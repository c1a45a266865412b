"""
Byte source backed by an Azure Blob Storage container.
"""

import logging

from azure.core.exceptions import ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.storage.blob import BlobServiceClient

from .resources import candidate_names

logger = logging.getLogger(__name__)


class BlobByteSource:
    """Resolves resource names to GIF blobs in one container."""

    def __init__(self, container_client, scale: float = 1.0):
        self.container_client = container_client
        self.scale = scale

    @classmethod
    def from_account(cls, account_name: str, container_name: str, scale: float = 1.0):
        """Connect to a storage account using managed identity."""
        credential = DefaultAzureCredential()
        account_url = f"https://{account_name}.blob.core.windows.net"
        service = BlobServiceClient(account_url, credential=credential)
        return cls(service.get_container_client(container_name), scale)

    def load(self, name: str) -> bytes:
        for candidate in candidate_names(name, self.scale):
            blob_client = self.container_client.get_blob_client(candidate)
            try:
                return blob_client.download_blob().readall()
            except ResourceNotFoundError:
                logger.debug("Blob %s not found", candidate)
        raise FileNotFoundError(f"No GIF blob named {name!r}")
