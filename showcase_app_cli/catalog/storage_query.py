"""Remote storage container enumeration.

Lists an Azure Blob Storage container and turns converted model assets
(``*.arrAsset``) into menu entries. An index file stored in the same
container contributes its entries as well.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol
from urllib.parse import quote

from azure.storage.blob.aio import ContainerClient

from .formats import is_json_name
from .formats import parse_catalog
from .models import ModelEntry
from .models import ModelReference

logger = logging.getLogger(__name__)

MODEL_SUFFIX = ".arrasset"


class StorageQuery(Protocol):
    """Live enumeration of models in a remote storage container."""

    async def query_models(self) -> list[ModelEntry]: ...


def default_container_client(container_url: str, sas_token: str) -> ContainerClient:
    """Create an async container client, authenticated with the SAS token if given."""
    return ContainerClient.from_container_url(container_url, credential=sas_token or None)


class BlobContainerQuery:
    """Enumerates model assets in a blob container."""

    def __init__(
        self,
        account_url: str,
        container: str,
        sas_token: str = "",
        index_file: str = "models.xml",
        client_factory: Callable[[str, str], ContainerClient] | None = None,
    ):
        """Initialize container query.

        Args:
            account_url: Storage account endpoint, e.g. https://acct.blob.core.windows.net
            container: Container name
            sas_token: Shared access signature (with or without leading '?')
            index_file: Name of an optional catalog index blob in the container
            client_factory: Builds the ContainerClient from (container_url, sas_token)
        """
        self.account_url = account_url.rstrip("/")
        self.container = container
        self.sas_token = sas_token.lstrip("?")
        self.index_file = index_file
        self._client_factory = client_factory or default_container_client

    @property
    def container_url(self) -> str:
        return f"{self.account_url}/{self.container}"

    def blob_url(self, blob_name: str) -> str:
        """Unsigned URL of a blob, used as the model reference."""
        return f"{self.container_url}/{quote(blob_name)}"

    async def query_models(self) -> list[ModelEntry]:
        """List model entries in the container.

        Returns:
            One entry per model asset, followed by entries from the index file

        Raises:
            azure.core.exceptions.AzureError: Listing or index download failed
            CatalogFormatError: Index file is malformed
        """
        entries = []
        has_index = False
        async with self._client_factory(self.container_url, self.sas_token) as client:
            async for blob in client.list_blobs():
                if blob.name.lower().endswith(MODEL_SUFFIX):
                    entries.append(self._entry_for_blob(blob.name))
                elif self.index_file and blob.name == self.index_file:
                    has_index = True

            if has_index:
                downloader = await client.download_blob(self.index_file)
                text = (await downloader.readall()).decode("utf-8-sig")
                index = parse_catalog(text, as_json=is_json_name(self.index_file), name=self.index_file)
                entries.extend(index.entries or [])

        logger.debug(f"Container {self.container} yielded {len(entries)} entries")
        return entries

    def _entry_for_blob(self, blob_name: str) -> ModelEntry:
        base_name = blob_name.rsplit("/", 1)[-1]
        name = base_name[: -len(MODEL_SUFFIX)]
        return ModelEntry(
            name=name,
            items=[ModelReference(name=name, url=self.blob_url(blob_name))],
            center_on_load=True,
        )

    def __repr__(self) -> str:
        return f"BlobContainerQuery({self.container_url})"
