import json
import xml.etree.ElementTree as ET
from datetime import date
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from jamcamping import site_build
from jamcamping.catalog import Catalog, load_catalog
from jamcamping.config import ShopFormat, ShopItem
from jamcamping.site_build import (
    PageMeta,
    build_site,
    product_structured_data,
    project_meta,
    render_page,
    render_sitemap,
    shop_meta,
    sitemap_entries,
)

ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = ROOT / "data"
TEMPLATE = ROOT / "site" / "index.html"
BASE = "https://example.org"
NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


@pytest.fixture(scope="module")
def catalog() -> Catalog:
    return load_catalog(DATA_DIR, strict=True)


def test_project_meta(catalog):
    meta = project_meta(catalog.project_by_id(1), BASE)
    assert meta.title == "Monkey Hut Shade Palace - DIY Festival Project | JamCamping"
    assert "Difficulty: intermediate." in meta.description
    assert meta.canonical_url == "https://example.org/projects/1"
    assert meta.structured_data["@type"] == "HowTo"
    assert meta.structured_data["estimatedCost"]["value"] == pytest.approx(133.99)
    assert meta.structured_data["image"] == "https://example.org/images/projects/1.jpg"


def test_shop_meta_and_aggregate_offer(catalog):
    item = catalog.shop_item_by_id("campsite-cosmic-guide")
    meta = shop_meta(item, BASE)
    assert meta.title == "The Cosmic Campsite Guide - Festival Guide | JamCamping Shop"
    assert meta.canonical_url == "https://example.org/shop/campsite-cosmic-guide"

    offers = meta.structured_data["offers"]
    assert offers["@type"] == "AggregateOffer"
    assert offers["lowPrice"] == pytest.approx(9.99)
    assert offers["highPrice"] == pytest.approx(24.99)
    assert offers["offerCount"] == 4


def test_product_without_formats_has_no_offers():
    data = product_structured_data(ShopItem(id="zine", title="Zine"))
    assert data["@type"] == "Product"
    assert "offers" not in data


def test_render_page_sets_meta_and_escapes():
    meta = PageMeta(
        title='Lights & "Totems"',
        description="<script>alert(1)</script>",
        keywords="a, b",
        canonical_url=f"{BASE}/projects/9",
        structured_data={"name": "</script><b>x</b>"},
    )
    html = render_page(TEMPLATE.read_text(encoding="utf-8"), meta)
    assert "<script>alert(1)</script>" not in html

    soup = BeautifulSoup(html, "html.parser")
    assert soup.title.string == 'Lights & "Totems"'
    assert soup.find("meta", attrs={"name": "description"})["content"] == "<script>alert(1)</script>"
    assert soup.find("meta", attrs={"property": "og:url"})["content"] == f"{BASE}/projects/9"
    assert soup.find("link", rel="canonical")["href"] == f"{BASE}/projects/9"
    assert len(soup.find_all("meta", attrs={"name": "description"})) == 1

    script = soup.find("script", attrs={"type": "application/ld+json"})
    assert json.loads(script.string) == {"name": "</script><b>x</b>"}


def test_render_page_adds_missing_tags():
    meta = PageMeta(title="T", description="D", keywords="K", canonical_url=BASE)
    soup = BeautifulSoup(render_page("<html><head></head><body></body></html>", meta), "html.parser")
    assert soup.title.string == "T"
    assert soup.find("meta", attrs={"name": "keywords"})["content"] == "K"
    assert soup.find("script") is None


def test_render_page_without_head_raises():
    meta = PageMeta(title="T", description="D", keywords="K", canonical_url=BASE)
    with pytest.raises(ValueError):
        render_page("just text", meta)


def test_sitemap_lists_stages_projects_and_shop(catalog):
    entries = sitemap_entries(catalog.projects, catalog.shop_items, BASE, today=date(2026, 1, 2))
    root = ET.fromstring(render_sitemap(entries))
    locs = [el.text for el in root.findall("sm:url/sm:loc", NS)]

    assert len(locs) == 13
    assert locs[0] == BASE
    assert locs[1] == f"{BASE}/#vendor"
    assert f"{BASE}/projects/6" in locs
    assert locs[-1] == f"{BASE}/shop/shakedown-lighting-manual"

    first = root.find("sm:url", NS)
    assert first.find("sm:priority", NS).text == "1.0"
    assert first.find("sm:lastmod", NS) is None
    assert root.findall("sm:url", NS)[5].find("sm:lastmod", NS).text == "2026-01-02"


def test_build_site_writes_everything(tmp_path):
    dist = tmp_path / "dist"
    report = build_site(
        data_dir=DATA_DIR,
        dist_dir=dist,
        template_path=TEMPLATE,
        base_url=BASE + "/",
        today=date(2026, 1, 2),
    )
    assert report.project_pages == 6
    assert report.shop_pages == 2
    assert report.pages == 8
    assert report.skipped == []

    page = (dist / "projects" / "1" / "index.html").read_text(encoding="utf-8")
    assert "Monkey Hut Shade Palace - DIY Festival Project" in page
    assert (dist / "shop" / "campsite-cosmic-guide" / "index.html").exists()
    assert "2026-01-02" in report.sitemap_path.read_text(encoding="utf-8")

    site = json.loads(report.structured_data_path.read_text(encoding="utf-8"))
    assert site["potentialAction"]["target"] == f"{BASE}/search?q={{search_term_string}}"
    assert site["mainEntity"]["numberOfItems"] == 6


def test_build_site_missing_template_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_site(data_dir=DATA_DIR, dist_dir=tmp_path, template_path=tmp_path / "missing.html")


def test_build_site_missing_fixtures_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_site(data_dir=tmp_path / "nowhere", dist_dir=tmp_path / "dist", template_path=TEMPLATE)


def test_build_site_skips_unsafe_shop_ids(tmp_path):
    fmt = ShopFormat(format="PDF", price=5)
    catalog = Catalog(
        projects=[],
        shop_items=[
            ShopItem(id="../escape", title="Bad", digital=[fmt]),
            ShopItem(id="good-one", title="Good", digital=[fmt]),
        ],
    )
    report = build_site(catalog=catalog, dist_dir=tmp_path, template_path=TEMPLATE, base_url=BASE)
    assert report.skipped == ["../escape"]
    assert report.shop_pages == 1
    assert not (tmp_path.parent / "escape").exists()
    assert "escape" not in report.sitemap_path.read_text(encoding="utf-8")


def test_cli_exits_nonzero_on_failure(tmp_path):
    with pytest.raises(SystemExit) as exc:
        site_build.main(["--data-dir", str(tmp_path / "nowhere"), "--dist-dir", str(tmp_path)])
    assert exc.value.code == 1


def test_cli_builds_into_dist(tmp_path, capsys):
    rc = site_build.main([
        "--data-dir", str(DATA_DIR),
        "--dist-dir", str(tmp_path),
        "--template", str(TEMPLATE),
        "--base-url", BASE,
    ])
    assert rc == 0
    assert (tmp_path / "sitemap.xml").exists()
    assert "Generated 8 pages" in capsys.readouterr().out
