from __future__ import annotations
"""
Build-time static pages for search engines and link previews.

Runs after the client bundle is built and reads the same fixtures:

- dist/projects/<id>/index.html   HowTo JSON-LD, per-project meta tags
- dist/shop/<id>/index.html       Product JSON-LD with an AggregateOffer
- dist/sitemap.xml                stage fragments, projects and shop items
- dist/structured-data.json       WebSite schema with a SearchAction

Each page starts from the built index.html shell. Meta tags are edited with
BeautifulSoup, so titles and descriptions from the fixtures are escaped.

    python -m jamcamping.site_build --dist-dir dist
"""

import argparse
import json
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
from loguru import logger

from . import config
from .catalog import Catalog, functional_total, load_catalog
from .config import PRICE_CURRENCY, SITE_NAME, SITE_TAGLINE, Project, ShopItem
from .constants import PROJECT_SITEMAP, SHOP_SITEMAP, STAGE_SITEMAP
from .utils.urls import absolute_url, project_path, shop_path, stage_url

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
SCHEMA_CONTEXT = "https://schema.org"
IN_STOCK = "https://schema.org/InStock"

_SAFE_SEGMENT_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


# ---------------------------
# Page metadata
# ---------------------------

@dataclass
class PageMeta:
    title: str
    description: str
    keywords: str
    canonical_url: str
    structured_data: Dict[str, Any] = field(default_factory=dict)


def project_meta(project: Project, base_url: str = config.SITE_BASE_URL) -> PageMeta:
    cat, diff = project.category, project.difficulty
    return PageMeta(
        title=f"{project.title} - DIY Festival Project | {SITE_NAME}",
        description=(
            f"{project.description} Learn how to build this {cat} project for your "
            f"festival campsite. Difficulty: {diff}."
        ),
        keywords=f"{project.title}, {cat}, festival {cat}, DIY {cat}, {diff} build",
        canonical_url=absolute_url(project_path(project.id), base_url),
        structured_data=project_structured_data(project, base_url),
    )


def shop_meta(item: ShopItem, base_url: str = config.SITE_BASE_URL) -> PageMeta:
    return PageMeta(
        title=f"{item.title} - Festival Guide | {SITE_NAME} Shop",
        description=item.description,
        keywords=f"{item.title}, festival guide, camping book, DIY manual",
        canonical_url=absolute_url(shop_path(item.id), base_url),
        structured_data=product_structured_data(item),
    )


# ---------------------------
# JSON-LD
# ---------------------------

def project_structured_data(project: Project, base_url: str = config.SITE_BASE_URL) -> Dict[str, Any]:
    """HowTo schema; the estimated cost is the functional (GA) build total."""
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "HowTo",
        "name": project.title,
        "description": project.description,
        "image": absolute_url(f"/images/projects/{project.id}.jpg", base_url),
        "totalTime": project.build_time,
        "estimatedCost": {
            "@type": "MonetaryAmount",
            "currency": PRICE_CURRENCY,
            "value": functional_total(project),
        },
        "supply": [
            {"@type": "HowToSupply", "name": part.item, "requiredQuantity": part.quantity}
            for part in project.functional_parts
        ],
        "tool": [{"@type": "HowToTool", "name": "Basic tools"}],
        "step": [
            {"@type": "HowToStep", "text": project.instructions, "name": "Build Instructions"}
        ],
        "category": project.category,
        "difficulty": project.difficulty,
        "keywords": f"{project.category}, festival camping, DIY, {project.difficulty}",
    }


def product_structured_data(item: ShopItem) -> Dict[str, Any]:
    """
    Product schema. The AggregateOffer spans every digital and print format;
    an item with no formats gets no offers block.
    """
    data: Dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Product",
        "name": item.title,
        "description": item.description,
        "image": item.cover,
        "brand": {"@type": "Brand", "name": SITE_NAME},
    }

    offers = [
        {
            "@type": "Offer",
            "name": f"Digital {fmt.format}",
            "price": fmt.price,
            "priceCurrency": PRICE_CURRENCY,
            "availability": IN_STOCK,
        }
        for fmt in item.digital
    ] + [
        {
            "@type": "Offer",
            "name": fmt.format,
            "price": fmt.price,
            "priceCurrency": PRICE_CURRENCY,
            "availability": IN_STOCK,
        }
        for fmt in item.print_formats
    ]
    if not offers:
        return data

    prices = [o["price"] for o in offers]
    data["offers"] = {
        "@type": "AggregateOffer",
        "lowPrice": min(prices),
        "highPrice": max(prices),
        "priceCurrency": PRICE_CURRENCY,
        "availability": IN_STOCK,
        "offerCount": len(offers),
        "offers": offers,
    }
    return data


def site_structured_data(projects: List[Project], base_url: str = config.SITE_BASE_URL) -> Dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "WebSite",
        "name": SITE_NAME,
        "description": SITE_TAGLINE,
        "url": base_url,
        "potentialAction": {
            "@type": "SearchAction",
            "target": f"{base_url}/search?q={{search_term_string}}",
            "query-input": "required name=search_term_string",
        },
        "mainEntity": {
            "@type": "ItemList",
            "name": "Festival DIY Projects",
            "numberOfItems": len(projects),
            "itemListElement": [
                {
                    "@type": "ListItem",
                    "position": i + 1,
                    "item": {
                        "@type": "HowTo",
                        "name": p.title,
                        "url": absolute_url(project_path(p.id), base_url),
                    },
                }
                for i, p in enumerate(projects)
            ],
        },
    }


def _json_for_script(data: Dict[str, Any]) -> str:
    # "</" would close the <script> element early
    return json.dumps(data, indent=2, ensure_ascii=False).replace("</", "<\\/")


# ---------------------------
# Template rendering
# ---------------------------

def _set_meta(head, attr: str, key: str, content: str, soup: BeautifulSoup) -> None:
    tag = head.find("meta", attrs={attr: key})
    if tag is None:
        tag = soup.new_tag("meta", attrs={attr: key})
        head.append(tag)
    tag["content"] = content


def render_page(template_html: str, meta: PageMeta) -> str:
    """
    Apply ``meta`` to a copy of the shell page: title, description,
    keywords, Open Graph tags, canonical link and a JSON-LD script.
    """
    soup = BeautifulSoup(template_html, "html.parser")
    head = soup.head
    if head is None:
        raise ValueError("Base template has no <head> element")

    if soup.title is None:
        head.append(soup.new_tag("title"))
    soup.title.string = meta.title

    _set_meta(head, "name", "description", meta.description, soup)
    _set_meta(head, "name", "keywords", meta.keywords, soup)
    _set_meta(head, "property", "og:title", meta.title, soup)
    _set_meta(head, "property", "og:description", meta.description, soup)
    _set_meta(head, "property", "og:url", meta.canonical_url, soup)

    canonical = head.find("link", rel="canonical")
    if canonical is None:
        canonical = soup.new_tag("link", attrs={"rel": "canonical"})
        head.append(canonical)
    canonical["href"] = meta.canonical_url

    if meta.structured_data:
        script = soup.new_tag("script", attrs={"type": "application/ld+json"})
        script.string = _json_for_script(meta.structured_data)
        head.append(script)

    return str(soup)


# ---------------------------
# Sitemap
# ---------------------------

@dataclass
class SitemapEntry:
    loc: str
    priority: str
    changefreq: str
    lastmod: Optional[str] = None


def sitemap_entries(
    projects: List[Project],
    shop_items: List[ShopItem],
    base_url: str = config.SITE_BASE_URL,
    today: Optional[date] = None,
) -> List[SitemapEntry]:
    lastmod = (today or date.today()).isoformat()
    entries: List[SitemapEntry] = []
    for stage in config.STAGES:
        priority, changefreq = STAGE_SITEMAP.get(stage, ("0.5", "monthly"))
        entries.append(SitemapEntry(absolute_url(stage_url(stage), base_url), priority, changefreq))
    for p in projects:
        entries.append(
            SitemapEntry(absolute_url(project_path(p.id), base_url), *PROJECT_SITEMAP, lastmod=lastmod)
        )
    for s in shop_items:
        entries.append(
            SitemapEntry(absolute_url(shop_path(s.id), base_url), *SHOP_SITEMAP, lastmod=lastmod)
        )
    return entries


def render_sitemap(entries: List[SitemapEntry]) -> str:
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for entry in entries:
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = entry.loc
        ET.SubElement(url, "priority").text = entry.priority
        ET.SubElement(url, "changefreq").text = entry.changefreq
        if entry.lastmod:
            ET.SubElement(url, "lastmod").text = entry.lastmod
    ET.indent(urlset, space="    ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(urlset, encoding="unicode") + "\n"


# ---------------------------
# End-to-end build
# ---------------------------

@dataclass
class SiteBuildReport:
    project_pages: int = 0
    shop_pages: int = 0
    skipped: List[str] = field(default_factory=list)
    sitemap_path: Optional[Path] = None
    structured_data_path: Optional[Path] = None

    @property
    def pages(self) -> int:
        return self.project_pages + self.shop_pages


def _write_page(dist_dir: Path, section: str, record_id: str, html: str) -> Path:
    page_dir = dist_dir / section / record_id
    page_dir.mkdir(parents=True, exist_ok=True)
    out = page_dir / "index.html"
    out.write_text(html, encoding="utf-8")
    logger.debug("Generated page: /{}/{}", section, record_id)
    return out


def build_site(
    catalog: Optional[Catalog] = None,
    data_dir: Path = config.DATA_DIR,
    dist_dir: Path = config.DIST_DIR,
    template_path: Path = config.TEMPLATE_PATH,
    base_url: str = config.SITE_BASE_URL,
    today: Optional[date] = None,
) -> SiteBuildReport:
    """
    Generate every static page plus sitemap.xml and structured-data.json.

    Fixture or template problems raise; nothing is written for a build that
    can't load its inputs.
    """
    logger.info("Building SEO pages into {}", dist_dir)
    if catalog is None:
        catalog = load_catalog(data_dir, strict=True)
    if not catalog.projects:
        logger.warning("No projects found; the sitemap will only list stages")
    if not catalog.shop_items:
        logger.warning("No shop items found")

    template_path = Path(template_path)
    if not template_path.exists():
        raise FileNotFoundError(
            f"Base template not found at {template_path}. Build the client first."
        )
    template_html = template_path.read_text(encoding="utf-8")
    base_url = base_url.rstrip("/")
    dist_dir = Path(dist_dir)
    dist_dir.mkdir(parents=True, exist_ok=True)

    report = SiteBuildReport()
    for project in catalog.projects:
        html = render_page(template_html, project_meta(project, base_url))
        _write_page(dist_dir, "projects", str(project.id), html)
        report.project_pages += 1

    for item in catalog.shop_items:
        if not _SAFE_SEGMENT_RE.match(item.id):
            logger.warning("Skipping shop item with unsafe id {!r}", item.id)
            report.skipped.append(item.id)
            continue
        html = render_page(template_html, shop_meta(item, base_url))
        _write_page(dist_dir, "shop", item.id, html)
        report.shop_pages += 1

    logger.info("Generated {} SEO pages", report.pages)

    built_shop = [s for s in catalog.shop_items if s.id not in report.skipped]
    entries = sitemap_entries(catalog.projects, built_shop, base_url, today)
    report.sitemap_path = dist_dir / "sitemap.xml"
    report.sitemap_path.write_text(render_sitemap(entries), encoding="utf-8")
    logger.info("Generated sitemap.xml with {} urls", len(entries))

    report.structured_data_path = dist_dir / "structured-data.json"
    report.structured_data_path.write_text(
        json.dumps(site_structured_data(catalog.projects, base_url), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info("Generated structured data")
    return report


# ---------------------------
# CLI entrypoint
# ---------------------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Generate static SEO pages for the catalog")
    ap.add_argument("--data-dir", type=str, default=str(config.DATA_DIR),
                    help="Directory or base URL holding projects.json and shop.json")
    ap.add_argument("--dist-dir", type=Path, default=config.DIST_DIR,
                    help="Build output directory (must contain the built index.html)")
    ap.add_argument("--template", type=Path, default=None,
                    help="Base HTML shell; defaults to <dist-dir>/index.html, then site/index.html")
    ap.add_argument("--base-url", type=str, default=config.SITE_BASE_URL)
    args = ap.parse_args(argv)

    template = args.template
    if template is None:
        built = args.dist_dir / "index.html"
        template = built if built.exists() else config.TEMPLATE_PATH

    try:
        report = build_site(
            data_dir=args.data_dir,
            dist_dir=args.dist_dir,
            template_path=template,
            base_url=args.base_url,
        )
    except Exception:
        logger.exception("SEO build failed")
        raise SystemExit(1)

    print(f"Generated {report.pages} pages, sitemap at {report.sitemap_path}")
    return 0


if __name__ == "__main__":
    main()
