import pytest


def test_string_default_and_required(helper_config, monkeypatch):
    monkeypatch.delenv("SOME_UNSET_KEY", raising=False)
    assert helper_config.get_string_val("some_unset_key", default="x") == "x"
    with pytest.raises(ValueError):
        helper_config.get_string_val("SOME_UNSET_KEY")


def test_blank_value_counts_as_unset(helper_config, monkeypatch):
    monkeypatch.setenv("BLANK_KEY", "   ")
    assert helper_config.get_string_val("BLANK_KEY", default="fallback") == "fallback"


def test_number_parsing(helper_config, monkeypatch):
    monkeypatch.setenv("INT_KEY", "3")
    monkeypatch.setenv("FLOAT_KEY", "0.25")
    monkeypatch.setenv("BAD_KEY", "three")
    assert helper_config.get_number_val("INT_KEY") == 3
    assert isinstance(helper_config.get_number_val("INT_KEY"), int)
    assert helper_config.get_number_val("FLOAT_KEY") == 0.25
    with pytest.raises(ValueError):
        helper_config.get_number_val("BAD_KEY")


def test_bool_and_list(helper_config, monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    monkeypatch.setenv("ITEMS", "[a, b,,c]")
    monkeypatch.setenv("BROKEN", "a,b")
    assert helper_config.get_bool_val("FLAG") is True
    assert helper_config.get_list_val("ITEMS") == ["a", "b", "c"]
    with pytest.raises(ValueError):
        helper_config.get_list_val("BROKEN")
