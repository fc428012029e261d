import logging

import pytest

from igc_client.client import IGCRestClient
from igc_client.contracts.references import Reference
from igc_client.errors import ClientConfigurationError, SerializationError, TransportError
from igc_client.search import Search, SearchSorting

BASE_URL = "https://igc.example.com:9443"
SEARCH_PATH = "/ibm/iis/igc-rest/v1/search"
ASSETS_PATH = "/ibm/iis/igc-rest/v1/assets"
POLICY_PATH = "/ibm/iis/igc-rest/v1/types/policy"
RID = "6662c0f2.e1b1ec6c.00263shl8.8d1ve9h.n8ag5s.f8iej8q1jfjj9vhfllrrb"


# --- Construction and session --------------------------------------------------


def test_rejects_non_https_base_url():
    with pytest.raises(ClientConfigurationError):
        IGCRestClient("http://igc.example.com:9080", "isadmin", "secret")


def test_rejects_missing_credentials():
    with pytest.raises(ClientConfigurationError):
        IGCRestClient(BASE_URL, None, None)


def test_construction_does_no_io(http):
    client = IGCRestClient.from_host("igc.example.com", 9443, "isadmin", "secret", http=http)
    assert client.base_url == BASE_URL
    assert client.successfully_initialised is False
    assert http.calls == []


def test_precomputed_authorization(http, payloads):
    client = IGCRestClient(BASE_URL, authorization="aXNhZG1pbjpzZWNyZXQ=", http=http)
    http.add("POST", SEARCH_PATH, body=payloads.item_list([]))

    client.open_session()

    assert http.calls[0]["headers"]["Authorization"] == "Basic aXNhZG1pbjpzZWNyZXQ="


def test_open_session_detects_workflow(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([{"_id": "d1", "_type": "term"}], num_total=3),
             cookies={"JSESSIONID": "s1"})

    assert client.open_session() is True

    assert client.workflow_enabled is True
    assert client.successfully_initialised is True
    probe = http.json_bodies(SEARCH_PATH)[0]
    assert probe["types"] == ["category", "term", "information_governance_policy", "information_governance_rule"]
    assert probe["pageSize"] == 1
    assert probe["workflowMode"] == "draft"
    assert http.calls[0]["headers"]["Authorization"] == "Basic aXNhZG1pbjpzZWNyZXQ="


def test_open_session_without_workflow(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([], num_total=0))

    assert client.open_session() is True
    assert client.workflow_enabled is False


def test_open_session_failure(client, http):
    http.add("POST", SEARCH_PATH, status=503)

    assert client.open_session() is False
    assert client.successfully_initialised is False


def test_disconnect_logs_out_and_clears_session(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([]), cookies={"JSESSIONID": "s1"})
    http.add("GET", "/ibm/iis/igc-rest/v1/logout", body="")
    client.open_session()

    client.disconnect()

    assert http.calls[-1]["headers"]["Cookie"] == "JSESSIONID=s1"
    assert not client.session.has_session


def test_requests_reuse_session_after_expiry(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([]), cookies={"JSESSIONID": "s1"})
    client.open_session()
    http.reset()
    http.add("POST", SEARCH_PATH, status=401)
    http.add("POST", SEARCH_PATH, body=payloads.item_list([{"_id": "t1", "_type": "term"}]), cookies={"JSESSIONID": "s2"})

    results = client.search(Search("term"))

    assert [r.id for r in results.items] == ["t1"]
    assert client.session.tokens == ["JSESSIONID=s2"]
    retried, first = http.calls[-1], http.calls[-2]
    assert retried["data"] == first["data"]


# --- Types ---------------------------------------------------------------------------


def test_get_types(client, http):
    http.add("GET", "/ibm/iis/igc-rest/v1/types", body=[
        {"_id": "term", "_name": "Term", "_url": "https://h/ibm/iis/igc-rest/v1/types/term"},
        {"_id": "category", "_name": "Category"},
    ])

    types = client.get_types()

    assert [t.id for t in types] == ["term", "category"]
    assert types[0].name == "Term"


def test_get_types_with_bad_body(client, http):
    http.add("GET", "/ibm/iis/igc-rest/v1/types", body={"unexpected": True})
    assert client.get_types() == []


# --- Assets --------------------------------------------------------------------------


def test_get_asset_by_id(client, http):
    http.add("GET", f"{ASSETS_PATH}/{RID}", body={"_id": RID, "_type": "term", "_name": "Customer", "short_description": "x"})

    asset = client.get_asset_by_id(RID)

    assert asset.id == RID
    assert asset.name == "Customer"
    assert asset.model_extra["short_description"] == "x"


def test_get_asset_ref_by_id_takes_first_of_many(client, http, payloads, caplog):
    http.add("POST", SEARCH_PATH, body=payloads.item_list(
        [{"_id": RID, "_type": "term", "_name": "First"}, {"_id": RID, "_type": "label", "_name": "Second"}],
        num_total=2,
    ))

    with caplog.at_level(logging.WARNING):
        ref = client.get_asset_ref_by_id(RID)

    assert ref.name == "First"
    assert "Found multiple assets" in caplog.text
    query = http.json_bodies(SEARCH_PATH)[0]
    assert query["types"] == ["main_object", "classification", "label", "user", "group"]
    assert query["pageSize"] == 1
    assert query["where"]["conditions"] == [{"property": "_id", "operator": "=", "value": RID}]
    assert len(http.calls) == 1


def test_get_asset_ref_by_id_not_found(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([]))
    assert client.get_asset_ref_by_id(RID) is None


def test_subset_of_properties_uses_default_page_size(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([{"_id": RID, "_type": "host", "_name": "ENGINE"}]))

    asset = client.get_asset_with_subset_of_properties(
        RID, "host_(engine)", ["name", "short_description"], sorting=SearchSorting("name"),
    )

    assert asset.id == RID
    query = http.json_bodies(SEARCH_PATH)[0]
    assert query["types"] == ["host"]
    assert query["properties"] == ["name", "short_description"]
    assert query["pageSize"] == 100
    assert query["sorts"] == [{"property": "name", "ascending": True}]


def test_subset_of_properties_without_page_size(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([]))

    assert client.get_asset_with_subset_of_properties(RID, "term", ["name"], page_size=0) is None
    assert "pageSize" not in http.json_bodies(SEARCH_PATH)[0]


def test_search_with_unparseable_body(client, http):
    http.add("POST", SEARCH_PATH, body="<html>gateway</html>")

    with pytest.raises(SerializationError):
        client.search(Search("term"))


def test_read_json_helpers_return_none_on_bad_input(client):
    assert client.read_json_into_model("nope") is None
    assert client.read_json_into_item_list("[]") is None
    assert client.read_json_into_model('{"_id": "a", "_type": "term"}').id == "a"


def test_get_value_as_json(client):
    ref = Reference(_id="a", _type="term", _name="A")
    assert client.get_value_as_json(ref) == '{"_id":"a","_type":"term","_name":"A"}'


def test_create_returns_id_from_location(client, http):
    http.add("POST", ASSETS_PATH, status=201, headers={"Location": f"{BASE_URL}{ASSETS_PATH}/{RID}"})

    rid = client.create({"_type": "term", "name": "Customer"})

    assert rid == RID
    assert http.json_bodies(ASSETS_PATH) == [{"_type": "term", "name": "Customer"}]
    assert http.calls[0]["headers"]["Content-Type"] == "application/json"


def test_create_without_201_fails(client, http):
    http.add("POST", ASSETS_PATH, status=200, body={"message": "nothing created"})
    assert client.create('{"_type": "term"}') is None


def test_create_with_ambiguous_location(client, http):
    http.add("POST", ASSETS_PATH, status=201, headers={"Location": "a,b"})
    assert client.create('{"_type": "term"}') is None


def test_make_create_request_raises_on_unexpected_status(client, http):
    http.add("POST", ASSETS_PATH, status=200)

    with pytest.raises(TransportError) as exc_info:
        client.make_create_request(ASSETS_PATH, "POST", "application/json", "{}")

    assert exc_info.value.status_code == 200


def test_update(client, http):
    http.add("PUT", f"{ASSETS_PATH}/{RID}", body={"_id": RID})

    assert client.update(RID, {"short_description": "updated"}) is True
    assert http.calls[0]["method"] == "PUT"


def test_update_failure(client, http):
    http.add("PUT", f"{ASSETS_PATH}/{RID}", status=404)

    assert client.update(RID, {"short_description": "updated"}) is False
    assert len(http.calls) == 2


def test_delete(client, http):
    http.add("DELETE", f"{ASSETS_PATH}/{RID}", body="")
    assert client.delete(RID) is True


def test_delete_with_error_body(client, http):
    http.add("DELETE", f"{ASSETS_PATH}/{RID}", body={"message": "in use"})
    assert client.delete(RID) is False


# --- Population ----------------------------------------------------------------------


def test_populate_context_when_already_present(client, http):
    term = Reference(_id=RID, _type="term", _context=[{"_id": "c1", "_type": "category"}])

    assert client.populate_context(term) is True
    assert http.calls == []


def test_populate_context_fetches_once(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([
        {"_id": RID, "_type": "term", "_context": [{"_id": "c1", "_type": "category", "_name": "Root"}]},
    ]))
    term = Reference(_id=RID, _type="term")

    assert client.populate_context(term) is True

    assert [c.name for c in term.context] == ["Root"]
    assert len(http.calls) == 1
    query = http.json_bodies(SEARCH_PATH)[0]
    assert query["types"] == ["term"]
    assert query["pageSize"] == 2
    assert "properties" not in query


def test_populate_context_not_found(client, http, payloads):
    http.add("POST", SEARCH_PATH, body=payloads.item_list([]))
    assert client.populate_context(Reference(_id=RID, _type="term")) is False


def test_populate_context_includes_modification_details(client, http, payloads, policy_details):
    http.add("GET", POLICY_PATH, body=policy_details)
    http.add("POST", SEARCH_PATH, body=payloads.item_list([{
        "_id": "p1", "_type": "policy", "_context": [{"_id": "c1", "_type": "category"}],
        "created_by": "isadmin", "created_on": 1500000000000,
        "modified_by": "steward", "modified_on": 1600000000000,
    }]))
    client.cache_type_details("policy")
    policy = client.models.build({"_id": "p1", "_type": "policy"})

    assert client.populate_context(policy) is True

    assert policy.context[0].id == "c1"
    assert client.get_property_by_name(policy, "modified_by") == "steward"
    assert http.json_bodies(SEARCH_PATH)[0]["properties"] == ["created_by", "created_on", "modified_by", "modified_on"]
    assert len(http.calls_to(SEARCH_PATH)) == 1


def test_populate_modification_details(client, http, payloads, policy_details):
    http.add("GET", POLICY_PATH, body=policy_details)
    http.add("POST", SEARCH_PATH, body=payloads.item_list([{
        "_id": "p1", "_type": "policy",
        "created_by": "isadmin", "created_on": 1500000000000,
        "modified_by": "steward", "modified_on": 1600000000000,
    }]))
    client.cache_type_details("policy")
    policy = client.models.build({"_id": "p1", "_type": "policy", "_name": "Retention"})

    assert client.populate_modification_details(policy) is True

    assert client.get_property_by_name(policy, "created_by") == "isadmin"
    assert client.get_property_by_name(policy, "modified_on") == 1600000000000
    query = http.json_bodies(SEARCH_PATH)[0]
    assert query["properties"] == ["created_by", "created_on", "modified_by", "modified_on"]
    assert query["pageSize"] == 2
    assert len(http.calls_to(SEARCH_PATH)) == 1


def test_populate_modification_details_noop_when_present(client, http, policy_details):
    http.add("GET", POLICY_PATH, body=policy_details)
    client.cache_type_details("policy")
    policy = client.models.build({"_id": "p1", "_type": "policy", "created_by": "isadmin"})

    assert client.populate_modification_details(policy) is True
    assert http.calls_to(SEARCH_PATH) == []


def test_populate_modification_details_noop_for_untracked_type(client, http):
    assert client.populate_modification_details(Reference(_id="t1", _type="term")) is True
    assert client.populate_modification_details(None) is True
    assert http.calls == []


# --- OpenIGC bundles -----------------------------------------------------------------


def test_upsert_bundle_replaces_existing(client, http, tmp_path):
    bundle = tmp_path / "MyBundle.zip"
    bundle.write_bytes(b"PK\x03\x04")
    http.add("GET", "/ibm/iis/igc-rest/v1/bundles", body=["MyBundle", "Other"])
    http.add("PUT", "/ibm/iis/igc-rest/v1/bundles", status=200)

    assert client.upsert_open_igc_bundle("MyBundle", bundle) is True
    assert http.calls[-1]["files"] == {"file": ("MyBundle.zip", b"PK\x03\x04")}


def test_upsert_bundle_creates_new(client, http, tmp_path):
    bundle = tmp_path / "New.zip"
    bundle.write_bytes(b"PK")
    http.add("GET", "/ibm/iis/igc-rest/v1/bundles", body=[])
    http.add("POST", "/ibm/iis/igc-rest/v1/bundles", status=200)

    assert client.upsert_open_igc_bundle("New", bundle) is True
    assert http.calls[-1]["method"] == "POST"


def test_upsert_and_delete_open_igc_asset(client, http):
    http.add("POST", "/ibm/iis/igc-rest/v1/bundles/assets", body='{"ID_1": "b1"}')
    http.add("DELETE", "/ibm/iis/igc-rest/v1/bundles/assets", body="")

    assert client.upsert_open_igc_asset("<doc/>") == '{"ID_1": "b1"}'
    assert client.delete_open_igc_asset("<doc/>") is True
    assert http.calls[0]["headers"]["Content-Type"] == "application/xml"
