import datetime as dt

import pytest

from assetrpc.dto import (
    Asset,
    AssetExtended,
    AssetMintStatus,
    File,
    PluginAuthority,
    Scope,
    UseMethod,
    file_from_str,
    get_mime_type_from_uri,
    parse_files,
    safe_select,
    to_uri,
    track_top_level_file,
)
from assetrpc.l2 import L2Asset, pubkey_to_string

TIMESTAMP = dt.datetime(2015, 2, 18, 23, 16, 9)


def make_l2_asset(**overrides):
    values = dict(
        pubkey=bytes([1] * 32),
        name="name1",
        owner="owner1111",
        creator="creator1111",
        collection=bytes([5] * 32),
        authority="authority1111",
        royalty_basis_points=0,
        create_timestamp=TIMESTAMP,
        update_timestamp=TIMESTAMP,
        bip44_account_num=1,
        bip44_address_num=1,
    )
    values.update(overrides)
    return L2Asset(**values)


METADATA = {
    "name": "name2",
    "description": "test description",
    "image": "http://host/image.png",
    "properties": {
        "files": [{"uri": "http://host/image.png", "type": "image/png"}],
        "category": "image",
    },
}


def make_asset(**overrides):
    extended = AssetExtended(
        asset=make_l2_asset(**overrides), metadata_uri="http://link/to/metadata.json"
    )
    return Asset.from_extended(extended, METADATA)


def test_parse_metadata():
    dto = make_asset()
    assert dto.content.metadata.get_item("name") == "name1"
    assert dto.ownership.owner == "owner1111"
    assert dto.creators[0].address == "creator1111"
    assert dto.authorities[0].address == "authority1111"
    assert dto.grouping[0].group_value == pubkey_to_string(bytes([5] * 32))
    assert dto.content.metadata.get_item("description") == "test description"
    assert dto.content.links["image"] == "http://host/image.png"
    assert dto.content.files[0].uri == "http://host/image.png"


def test_asset_fixed_fields():
    dto = make_asset()
    assert dto.interface == "MplCoreAsset"
    assert dto.id == pubkey_to_string(bytes([1] * 32))
    assert dto.content.json_uri == "http://link/to/metadata.json"
    assert dto.content.metadata.get_item("symbol") == ""
    assert dto.authorities[0].scopes == [Scope.FULL]
    assert dto.mutable is True and dto.burnt is False


def test_royalty_from_basis_points():
    dto = make_asset(royalty_basis_points=500)
    assert dto.royalty.basis_points == 500
    assert dto.royalty.percent == pytest.approx(0.05)
    assert dto.plugins.data.basis_points == 500
    assert dto.plugins.data.creators == dto.creators


def test_no_collection_means_no_grouping():
    dto = make_asset(collection=None)
    assert dto.grouping is None
    assert "grouping" not in dto.to_json()


def test_to_json_shape():
    document = make_asset().to_json()
    assert document["content"]["$schema"] == "https://schema.metaplex.com/nft1.0.json"
    assert document["supply"] is None
    assert "uses" not in document
    assert "lamports" not in document
    assert document["plugins"]["authority"] == "UpdateAuthority"
    assert document["plugins"]["data"]["rule_set"] == "None"
    assert document["royalty"]["royalty_model"] == "creators"
    assert document["ownership"]["ownership_model"] == "single"
    assert document["ownership"]["delegate"] is None
    assert list(document["content"]["metadata"]) == ["description", "name", "symbol"]


def test_json_round_trip():
    dto = make_asset(royalty_basis_points=1234)
    assert Asset.from_json(dto.to_json()) == dto


def test_address_plugin_authority_round_trip():
    dto = make_asset()
    dto.plugins.authority = PluginAuthority("Address", "addr1111")
    document = dto.to_json()
    assert document["plugins"]["authority"] == {"Address": {"address": "addr1111"}}
    assert Asset.from_json(document) == dto


def test_plugin_authority_requires_address_only_for_address():
    with pytest.raises(ValueError):
        PluginAuthority("Address")
    with pytest.raises(ValueError):
        PluginAuthority("Owner", "addr1111")


def test_from_json_missing_required_field():
    with pytest.raises(ValueError):
        Asset.from_json({"interface": "MplCoreAsset", "id": "abc"})


def test_from_json_bad_enum_value():
    document = make_asset().to_json()
    document["royalty"]["royalty_model"] = "nobody"
    with pytest.raises(ValueError):
        Asset.from_json(document)


def test_empty_json_is_null():
    assert Asset.empty_json() is None


def test_asset_extended_takes_royalty_from_asset():
    extended = AssetExtended(asset=make_l2_asset(royalty_basis_points=42), metadata_uri="u")
    assert extended.royalty_basis_points == 42


def test_scope_parse():
    assert Scope.parse("royalty") is Scope.ROYALTY
    assert Scope.parse("metadata") is Scope.METADATA
    assert Scope.parse("extension") is Scope.EXTENSION
    assert Scope.parse("anything") is Scope.FULL


def test_use_method_parse():
    assert UseMethod.parse("Burn") is UseMethod.BURN
    assert UseMethod.parse("Multiple") is UseMethod.MULTIPLE
    assert UseMethod.parse("other") is UseMethod.SINGLE


def test_mint_status_values():
    assert AssetMintStatus("l1_solana") is AssetMintStatus.L1_SOLANA
    assert AssetMintStatus.MINTING.value == "minting"


def test_safe_select():
    document = {"a": 1, "list": [{"b": 2}, {"b": 3}]}
    assert safe_select(document, "$.a") == 1
    assert safe_select(document, "$.missing") is None
    assert safe_select(document, "$.list[*].b") == 3
    assert safe_select(document, "$.list[0].b") == 2
    assert safe_select(document, "not a path") is None


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("http://host/image.png", "image/png"),
        ("http://host/photo.jpg", "image/jpeg"),
        ("http://host/video.mp4", "video/mp4"),
        ("http://host/anim.gif", "image/gif"),
        ("not a url", "image/png"),
        ("http://host/", "image/png"),
    ],
)
def test_get_mime_type_from_uri(uri, expected):
    assert get_mime_type_from_uri(uri) == expected


def test_to_uri():
    assert to_uri("relative/path.png") is None
    assert to_uri("127.0.0.1:8080/asset/x/metadata.json") is None
    assert to_uri("https://example.com/a/b.png").path == "/a/b.png"


def test_file_from_str():
    assert file_from_str("http://host/a.jpg") == File(uri="http://host/a.jpg", mime="image/jpeg")


def test_track_top_level_file():
    files = {"http://host/a.png": File(uri="http://host/a.png", mime="custom/type")}
    track_top_level_file(files, "http://host/a.png")
    track_top_level_file(files, "http://host/b.mp4")
    track_top_level_file(files, 5)
    assert files["http://host/a.png"].mime == "custom/type"
    assert files["http://host/b.mp4"].mime == "video/mp4"
    assert len(files) == 2


def test_parse_files_image_first():
    metadata = {
        "image": "http://host/img.png",
        "properties": {
            "files": [
                {"uri": "http://host/a.mp4", "type": "video/mp4"},
                {"uri": "http://host/img.png", "type": "image/png"},
            ]
        },
    }
    _, files = parse_files(metadata)
    assert [f.uri for f in files] == ["http://host/img.png", "http://host/a.mp4"]


def test_parse_files_url_instead_of_uri():
    metadata = {"properties": {"files": [{"url": "http://host/a.gif", "type": "image/gif"}]}}
    _, files = parse_files(metadata)
    assert files == [File(uri="http://host/a.gif", mime="image/gif")]


def test_parse_files_string_entries():
    _, files = parse_files({"properties": {"files": ["http://host/a.jpg"]}})
    assert files == [File(uri="http://host/a.jpg", mime="image/jpeg")]


def test_parse_files_uri_without_type_is_json_text():
    _, files = parse_files({"properties": {"files": [{"uri": "http://host/x.jpg"}]}})
    assert files == [File(uri='"http://host/x.jpg"', mime="image/png")]


def test_parse_files_non_string_type_guesses_mime():
    _, files = parse_files({"properties": {"files": [{"uri": "http://host/a.mp4", "type": 5}]}})
    assert files == [File(uri="http://host/a.mp4", mime="video/mp4")]


def test_parse_files_non_string_uri_is_skipped():
    _, files = parse_files({"properties": {"files": [{"uri": 5, "type": "image/png"}]}})
    assert files == []


def test_parse_files_links_and_top_level_animation():
    metadata = {"animation_url": "http://host/a.mp4", "external_url": "https://example.com"}
    links, files = parse_files(metadata)
    assert links == {"animation_url": "http://host/a.mp4", "external_url": "https://example.com"}
    assert files == [File(uri="http://host/a.mp4", mime="video/mp4")]


def test_parse_files_on_non_object_metadata():
    links, files = parse_files("just text")
    assert links == {}
    assert files == []