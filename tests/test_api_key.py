from assetrpc.api_key import ApiKey, ApiKeys, Username


def _keys():
    return ApiKeys({ApiKey("placeholder"): Username("alice"), ApiKey("token"): Username("bob")})


def test_known_key_returns_username():
    assert _keys().contains_api_key_then_get_username("placeholder") == Username("alice")
    assert _keys().contains_api_key_then_get_username("token") == Username("bob")


def test_unknown_key_returns_none():
    assert _keys().contains_api_key_then_get_username("secret") is None


def test_empty_table_finds_nothing():
    assert ApiKeys().contains_api_key_then_get_username("placeholder") is None


def test_repr_hides_key_value():
    text = repr(ApiKey("placeholder"))
    assert "placeholder" not in text
    assert "********" in text


def test_keys_compare_by_value():
    assert ApiKey("token") == ApiKey("token")
    assert len({ApiKey("token"), ApiKey("token")}) == 1


def test_table_is_copied_from_source_mapping():
    source = {ApiKey("placeholder"): Username("alice")}
    keys = ApiKeys(source)
    source.clear()
    assert keys.contains_api_key_then_get_username("placeholder") == Username("alice")


def test_username_text():
    assert str(Username("alice")) == "alice"