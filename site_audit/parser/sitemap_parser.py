# File: site_audit/parser/sitemap_parser.py
"""site_audit.parser.sitemap_parser: Разбор XML sitemap и sitemap-индексов."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Union

from lxml import etree

SitemapKind = Literal["urlset", "sitemapindex", "unknown"]

__all__ = ["SitemapDocument", "parse_sitemap"]


@dataclass(slots=True)
class SitemapDocument:
    """Результат разбора sitemap: тип корня и значения <loc> в порядке документа."""

    kind: SitemapKind
    locations: List[str] = field(default_factory=list)
    root_tag: str = ""


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def parse_sitemap(xml_content: Union[str, bytes]) -> SitemapDocument:
    """Разбирает XML sitemap и определяет его форму.

    Для ``<urlset>`` возвращаются ``<url>/<loc>``, для ``<sitemapindex>`` —
    ``<sitemap>/<loc>``. Пространства имён игнорируются. Всё остальное, включая
    пустой или нечитаемый документ, даёт ``kind="unknown"``.

    Пример:
    ```python
    from site_audit.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', 'rb') as f:
        doc = parse_sitemap(f.read())
    print(doc.kind, doc.locations)
    ```
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError:
        root = None
    if root is None:
        return SitemapDocument(kind="unknown")

    root_tag = _local_name(root.tag)
    if root_tag == "urlset":
        entry_tag = "url"
    elif root_tag == "sitemapindex":
        entry_tag = "sitemap"
    else:
        return SitemapDocument(kind="unknown", root_tag=root_tag)

    locations: List[str] = []
    for entry in root.findall(f"{{*}}{entry_tag}"):
        loc = entry.find("{*}loc")
        if loc is not None and loc.text and loc.text.strip():
            locations.append(loc.text.strip())
    return SitemapDocument(kind=root_tag, locations=locations, root_tag=root_tag)
