"""Catalog file codec.

Catalog index files are XML documents by default:

    <ModelFile>
      <Containers>
        <Container Name="Engine" CenterOnLoad="true">
          <Items>
            <Model Name="Engine" Url="builtin://Engine" />
          </Items>
        </Container>
      </Containers>
    </ModelFile>

Files ending in ``.json`` hold the JSON dump of ModelCatalog instead.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from pydantic import ValidationError

from .models import ModelCatalog
from .models import ModelEntry
from .models import ModelReference

ROOT_TAG = "ModelFile"


class CatalogFormatError(ValueError):
    """Catalog document could not be parsed."""


def is_json_name(name: str) -> bool:
    """Check whether a file name or URL refers to a JSON catalog."""
    return name.split("?", 1)[0].lower().endswith(".json")


def parse_catalog(text: str, *, as_json: bool = False, name: str = "") -> ModelCatalog:
    """Parse catalog text.

    Args:
        text: Document contents
        as_json: Parse as JSON instead of XML
        name: Label stored on the resulting catalog

    Returns:
        Parsed ModelCatalog

    Raises:
        CatalogFormatError: Document is malformed
    """
    if as_json:
        try:
            catalog = ModelCatalog.model_validate_json(text)
        except ValidationError as e:
            raise CatalogFormatError(f"Invalid JSON catalog: {e}") from e
        if name and not catalog.name:
            catalog.name = name
        return catalog

    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise CatalogFormatError(f"Invalid XML catalog: {e}") from e

    if root.tag != ROOT_TAG:
        raise CatalogFormatError(f"Expected <{ROOT_TAG}> root element, found <{root.tag}>")

    containers = root.find("Containers")
    if containers is None:
        return ModelCatalog(name=name)

    return ModelCatalog(name=name, entries=[_parse_container(c) for c in containers.findall("Container")])


def _parse_container(element: ET.Element) -> ModelEntry:
    items = []
    items_element = element.find("Items")
    if items_element is not None:
        for model in items_element.findall("Model"):
            items.append(ModelReference(name=model.get("Name", ""), url=model.get("Url", "")))

    name = element.get("Name")
    if name is None:
        name = items[0].name if items else ""

    center = element.get("CenterOnLoad", "false").strip().lower() == "true"
    return ModelEntry(name=name, items=items, center_on_load=center)


def dump_catalog(catalog: ModelCatalog, *, as_json: bool = False) -> str:
    """Serialize a catalog to text in the requested format."""
    if as_json:
        return catalog.model_dump_json(indent=2)

    root = ET.Element(ROOT_TAG)
    containers = ET.SubElement(root, "Containers")
    for entry in catalog.entries or []:
        container = ET.SubElement(
            containers,
            "Container",
            {"Name": entry.name, "CenterOnLoad": "true" if entry.center_on_load else "false"},
        )
        items = ET.SubElement(container, "Items")
        for item in entry.items:
            ET.SubElement(items, "Model", {"Name": item.name, "Url": item.url})

    ET.indent(root)
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"
