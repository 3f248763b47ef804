import pytest
from foodfinder.core.identifiers import normalize_store_id


def test_normalize_store_id():
    assert normalize_store_id(42) == "42"
    assert normalize_store_id("abc-123") == "abc-123"
    assert normalize_store_id(None) == ""
    assert normalize_store_id(" S1 ") == " S1 "


def test_normalize_store_id_rejects_bool():
    with pytest.raises(TypeError):
        normalize_store_id(True)
