import pytest

from hanzikit.lrucache import LRUCache


def test_insert_and_find():
    cache = LRUCache(4)
    assert cache.insert("ni", "你") == "你"
    assert cache.find("ni") == "你"
    assert "ni" in cache
    assert len(cache) == 1


def test_insert_existing_keeps_old_value():
    cache = LRUCache(4)
    cache.insert("a", 1)
    assert cache.insert("a", 2) is None
    assert cache.find("a") == 1


def test_eviction_of_least_recent():
    cache = LRUCache(2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.insert("c", 3)
    assert "a" not in cache
    assert "b" in cache and "c" in cache
    assert len(cache) == 2


def test_find_refreshes_order():
    cache = LRUCache(2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert cache.find("a") == 1
    cache.insert("c", 3)
    assert "a" in cache
    assert "b" not in cache


def test_contains_does_not_refresh_order():
    cache = LRUCache(2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert "a" in cache
    cache.insert("c", 3)
    assert "a" not in cache


def test_find_missing():
    cache = LRUCache(2)
    assert cache.find("zzz") is None


def test_erase_and_clear():
    cache = LRUCache(3)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.erase("a")
    cache.erase("missing")
    assert "a" not in cache
    assert len(cache) == 1
    cache.clear()
    assert len(cache) == 0


def test_size_never_exceeds_capacity():
    cache = LRUCache(5)
    for i in range(50):
        cache.insert(i, i)
        assert len(cache) <= cache.capacity
    assert len(cache) == cache.capacity


def test_invalid_capacity():
    with pytest.raises(ValueError):
        LRUCache(0)