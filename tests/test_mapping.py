from jamcamping.config import SearchResponse
from jamcamping.mapping import map_results_to_response, stage_infos
from jamcamping.search import search
from jamcamping.search_types import RecordKind, SearchableRecord


RECORDS = [
    SearchableRecord(1, RecordKind.PROJECT, "Solar <Lantern> Totem", "Glows & guides", "lighting"),
    SearchableRecord("manual", RecordKind.SHOP_ITEM, "Lighting Manual", "LED recipes"),
]


def test_map_results_to_response_structure():
    resp = map_results_to_response("  light ", search("light", RECORDS))
    assert isinstance(resp, SearchResponse)
    assert resp.query == "light"
    assert resp.hints == []
    assert [(h.kind, h.id, h.score) for h in resp.results] == [
        ("shop", "manual", 10),
        ("project", "1", 8),
    ]
    first = resp.results[0]
    assert first.url == "/shop/manual"
    assert first.app_url == "/#vendor"
    assert resp.results[1].app_url == "/"
    assert first.title_html == "<mark>Light</mark>ing Manual"


def test_hit_html_is_escaped():
    resp = map_results_to_response("totem", search("totem", RECORDS))
    hit = resp.results[0]
    assert hit.title == "Solar <Lantern> Totem"
    assert hit.title_html == "Solar &lt;Lantern&gt; <mark>Totem</mark>"
    assert hit.description_html == "Glows &amp; guides"


def test_empty_results_carry_hints():
    resp = map_results_to_response("zz", [])
    assert resp.results == []
    assert resp.hints == ["shade", "lighting", "cooling"]


def test_stage_infos():
    infos = stage_infos()
    assert [i.index for i in infos] == [0, 1, 2, 3, 4]
    assert infos[0].url == "/"
    assert infos[1].title.startswith("Cosmic Knowledge Shop")
    custom = stage_infos(["main", "backstage"])
    assert custom[1].title == "Backstage"
    assert custom[1].description == ""
