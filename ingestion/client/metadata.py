"""
Schema discovery from the feed's $metadata document.

Collections are discovered, never hardcoded: the registry holds whatever
entity sets the document declares, and callers look them up with an
ordered list of candidate names.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import xml.etree.ElementTree as ET
import logging

from core.exceptions import MetadataError

logger = logging.getLogger(__name__)


@dataclass
class Property:
    name: str
    type: str
    nullable: bool = True


@dataclass
class Collection:
    """One entity set exposed by the feed"""
    name: str
    url: str
    entity_type: Optional[str] = None
    properties: List[Property] = field(default_factory=list)
    
    @property
    def field_names(self) -> List[str]:
        return [p.name for p in self.properties]


def _local(tag: str) -> str:
    """Strip the {namespace} prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1]


def _short_type(qualified: str) -> str:
    return qualified.rsplit(".", 1)[-1] if qualified else qualified


class CollectionRegistry:
    """
    In-memory map of collection name → Collection.

    resolve() never raises: absence is a normal outcome that lets the
    caller skip an optional feature.
    """
    
    def __init__(self, collections: Optional[Sequence[Collection]] = None, base_url: str = ""):
        self.base_url = base_url.rstrip("/")
        self._collections: Dict[str, Collection] = {}
        for collection in collections or []:
            self.add(collection)
    
    def add(self, collection: Collection):
        self._collections[collection.name] = collection
    
    @property
    def names(self) -> List[str]:
        return list(self._collections.keys())
    
    def __len__(self) -> int:
        return len(self._collections)
    
    def __contains__(self, name: str) -> bool:
        return name in self._collections
    
    def get(self, name: str) -> Optional[Collection]:
        return self._collections.get(name)
    
    def resolve(self, candidates: Sequence[str]) -> Optional[Collection]:
        """
        Return the first collection matching a candidate, in candidate order.

        Each candidate is tried as a case-insensitive exact match first,
        then as a case-insensitive substring of a collection name.
        """
        for candidate in candidates:
            wanted = candidate.lower()
            
            for name, collection in self._collections.items():
                if name.lower() == wanted:
                    return collection
            
            for name, collection in self._collections.items():
                if wanted in name.lower():
                    return collection
        
        return None


def parse_metadata(xml_text: str, base_url: str) -> CollectionRegistry:
    """
    Parse a CSDL $metadata document into a CollectionRegistry.

    Args:
        xml_text: Raw XML body
        base_url: Service root; each collection URL is base_url/name

    Raises:
        MetadataError: If the document is not well-formed XML
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MetadataError(
            "Metadata document is not valid XML",
            context={"base_url": base_url, "bytes": len(xml_text)},
            original_exception=e
        )
    
    base_url = base_url.rstrip("/")
    
    # First pass: entity type → properties
    entity_types: Dict[str, List[Property]] = {}
    for element in root.iter():
        if _local(element.tag) != "EntityType":
            continue
        type_name = element.get("Name")
        if not type_name:
            continue
        properties = [
            Property(
                name=child.get("Name", ""),
                type=child.get("Type", ""),
                nullable=child.get("Nullable") != "false",
            )
            for child in element
            if _local(child.tag) == "Property" and child.get("Name")
        ]
        entity_types[type_name] = properties
    
    # Second pass: entity sets
    registry = CollectionRegistry(base_url=base_url)
    for element in root.iter():
        if _local(element.tag) != "EntitySet":
            continue
        name = element.get("Name")
        if not name:
            continue
        entity_type = _short_type(element.get("EntityType", ""))
        registry.add(Collection(
            name=name,
            url=f"{base_url}/{name}",
            entity_type=entity_type or None,
            properties=entity_types.get(entity_type, []),
        ))
    
    logger.info(f"Discovered {len(registry)} collections from metadata")
    return registry
