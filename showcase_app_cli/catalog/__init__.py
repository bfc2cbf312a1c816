"""Model catalog resolution.

Loads the model menu from the first data source that yields entries.
"""

from .display import DisplayConsumer
from .display import ListDisplay
from .formats import CatalogFormatError
from .models import FallbackObject
from .models import ModelCatalog
from .models import ModelEntry
from .models import ModelReference
from .models import is_empty
from .resolver import Resolution
from .resolver import SourceResolver
from .resolver import resolve_catalog
from .resolver import sort_entries
from .results import Err
from .results import ErrorKind
from .results import Ok
from .sources import SourceDescriptor
from .sources import SourceKind
from .sources import build_sources
from .storage_query import BlobContainerQuery
from .stores import LocalCatalogStore
from .stores import RemoteCatalogFetch

__all__ = [
    "BlobContainerQuery",
    "CatalogFormatError",
    "DisplayConsumer",
    "Err",
    "ErrorKind",
    "FallbackObject",
    "ListDisplay",
    "LocalCatalogStore",
    "ModelCatalog",
    "ModelEntry",
    "ModelReference",
    "Ok",
    "RemoteCatalogFetch",
    "Resolution",
    "SourceDescriptor",
    "SourceKind",
    "SourceResolver",
    "build_sources",
    "is_empty",
    "resolve_catalog",
    "sort_entries",
]
