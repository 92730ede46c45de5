import json

import pytest

from jamcamping.cart import Cart
from jamcamping.config import Part, Project


def _project(pid=1, title="Monkey Hut Shade Palace"):
    return Project(
        id=pid,
        title=title,
        category="shade",
        image="🛖",
        functional_parts=[Part(item="conduit", price=8.5, quantity=6), Part(item="tarp", price=34.99)],
        extravagant_parts=[Part(item="frame kit", price=189.0)],
    )


def test_add_functional_and_extravagant_lines(tmp_path):
    cart = Cart(tmp_path / "cart.json")
    ga = cart.add(_project(), "functional")
    vip = cart.add(_project(), "extravagant")

    assert ga.id == "1-functional"
    assert ga.total == pytest.approx(85.99)
    assert ga.emoji == "🛖"
    assert vip.total == pytest.approx(189.0)
    assert cart.count == 2
    assert cart.total == pytest.approx(274.99)


def test_adding_same_build_replaces_line(tmp_path):
    cart = Cart(tmp_path / "cart.json")
    cart.add(_project(title="Old name"), "functional")
    cart.add(_project(title="New name"), "functional")
    assert cart.count == 1
    assert cart.lines[0].title == "New name"


def test_unknown_build_type_raises(tmp_path):
    cart = Cart(tmp_path / "cart.json")
    with pytest.raises(ValueError):
        cart.add(_project(), "deluxe")
    assert cart.count == 0


def test_cart_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "cart.json"
    Cart(path).add(_project(), "functional")

    reloaded = Cart(path)
    assert [line.id for line in reloaded.lines] == ["1-functional"]
    assert reloaded.lines[0].parts[0].item == "conduit"


def test_remove_and_clear(tmp_path):
    path = tmp_path / "cart.json"
    cart = Cart(path)
    cart.add(_project(1), "functional")
    cart.add(_project(2), "functional")

    assert cart.remove("1-functional") is True
    assert cart.remove("1-functional") is False
    assert [line.project_id for line in Cart(path).lines] == [2]

    cart.clear()
    assert cart.count == 0
    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_unreadable_cart_starts_empty(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text("{not json", encoding="utf-8")
    assert Cart(path).count == 0

    path.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")
    assert Cart(path).count == 0


def test_in_memory_cart_writes_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cart = Cart(path=None)
    cart.add(_project(), "functional")
    assert cart.count == 1
    assert list(tmp_path.iterdir()) == []
