"""Property-based round-trip tests for typed cache accessors using Hypothesis."""

from __future__ import annotations

from hypothesis import given, strategies as st

from localvault.services.cache import TTLCache
from localvault.storage.memory_store import MemoryStore

# orjson rejects lone surrogates
json_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=20)

json_values = st.recursive(
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**53), max_value=2**53)
    | st.floats(allow_nan=False, allow_infinity=False)
    | json_text,
    lambda children: st.lists(children, max_size=5)
    | st.dictionaries(json_text, children, max_size=5),
    max_leaves=20,
)


def _fresh_cache() -> TTLCache:
    return TTLCache(MemoryStore(), clock=lambda: 0.0)


def _read_back(cache: TTLCache, getter, key: str):
    """Read through the cache, then again straight from the store."""
    cached = getter(key)
    cache.invalidate(key)
    return cached, getter(key)


@given(json_values)
def test_json_roundtrip(value):
    cache = _fresh_cache()

    cache.set_json("doc", value)

    cached, stored = _read_back(cache, cache.get_json, "doc")
    assert cached == value
    assert stored == value


@given(st.integers(min_value=-(2**63), max_value=2**63))
def test_int_roundtrip(value):
    cache = _fresh_cache()

    cache.set_int("count", value)

    assert _read_back(cache, cache.get_int, "count") == (value, value)


@given(st.floats(allow_nan=False))
def test_float_roundtrip(value):
    cache = _fresh_cache()

    cache.set_float("ratio", value)

    assert _read_back(cache, cache.get_float, "ratio") == (value, value)


@given(st.booleans())
def test_bool_roundtrip(value):
    cache = _fresh_cache()

    cache.set_bool("flag", value)

    assert _read_back(cache, cache.get_bool, "flag") == (value, value)
