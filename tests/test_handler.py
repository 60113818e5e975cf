import json
from unittest import mock

from record_gateway.handler import RecordHandler
from record_gateway.update_expression import ABSENT


def test_create_then_read(invoke):
    status, body = invoke(httpMethod="POST", body=json.dumps({"id": "s1", "name": "A"}))
    assert status == 201
    assert body == {"item": {"id": "s1", "name": "A"}}

    status, body = invoke(httpMethod="GET", pathParameters={"id": "s1"})
    assert status == 200
    assert body == {"id": "s1", "name": "A"}


def test_create_is_upsert(invoke):
    invoke(httpMethod="POST", body={"id": "s1", "name": "A"})
    status, _ = invoke(httpMethod="POST", body={"id": "s1", "name": "B"})
    assert status == 201

    _, body = invoke(action="read", pathParameters={"id": "s1"})
    assert body == {"id": "s1", "name": "B"}


def test_create_key_overrides_payload_key(invoke, store):
    status, body = invoke(httpMethod="POST", pathParameters={"id": "p1"}, body={"id": "b1", "x": 1})
    assert status == 201
    assert body["item"] == {"id": "p1", "x": 1}
    assert store.get("b1") is None


def test_create_drops_absent_fields(handler, store):
    handler({"httpMethod": "POST", "body": {"id": "s1", "name": "A", "note": ABSENT}})
    assert store.get("s1") == {"id": "s1", "name": "A"}


def test_insert_conflicts_on_existing_key(invoke):
    status, _ = invoke(action="insert", body={"id": "s1", "name": "A"})
    assert status == 201

    status, body = invoke(action="insert", body={"id": "s1", "name": "B"})
    assert status == 409
    assert "error" in body

    _, body = invoke(httpMethod="GET", pathParameters={"id": "s1"})
    assert body["name"] == "A"


def test_read_missing_is_not_found(invoke):
    status, body = invoke(httpMethod="GET", pathParameters={"id": "nope"})
    assert status == 404
    assert body == {"error": "Not found"}


def test_update_changes_only_given_fields(invoke):
    invoke(httpMethod="POST", body={"id": "s1", "name": "A", "age": 20})

    status, body = invoke(httpMethod="PUT", pathParameters={"id": "s1"}, body={"age": 21, "note": None})
    assert status == 200
    assert body == {
        "message": "The item is updated",
        "item": {"id": "s1", "name": "A", "age": 21, "note": None},
    }


def test_update_never_changes_identity(invoke, store):
    invoke(httpMethod="POST", body={"id": "s1", "name": "A"})
    invoke(httpMethod="PUT", pathParameters={"id": "s1"}, body={"id": "other", "name": "B"})

    assert store.get("s1") == {"id": "s1", "name": "B"}
    assert store.get("other") is None


def test_update_missing_record_is_not_found(invoke, store):
    status, body = invoke(httpMethod="PUT", pathParameters={"id": "ghost"}, body={"name": "A"})
    assert status == 404
    assert "error" in body
    assert len(store) == 0


def test_empty_update_skips_the_store_write(handler, store):
    store.put({"id": "s1", "name": "A"})

    with mock.patch.object(store, "update_existing") as update_existing:
        envelope = handler({"httpMethod": "PUT", "body": {"id": "s1", "gone": ABSENT}})

    update_existing.assert_not_called()
    assert envelope["statusCode"] == 200
    assert json.loads(envelope["body"]) == {"message": "No changes", "item": {"id": "s1", "name": "A"}}


def test_empty_update_on_missing_record_is_not_found(invoke):
    status, _ = invoke(httpMethod="PUT", body={"id": "ghost"})
    assert status == 404


def test_delete_is_idempotent(invoke):
    invoke(httpMethod="POST", body={"id": "s1"})

    for _ in range(2):
        status, body = invoke(httpMethod="DELETE", pathParameters={"id": "s1"})
        assert status == 200
        assert body == {"message": "Deleted", "id": "s1"}

    status, _ = invoke(httpMethod="GET", pathParameters={"id": "s1"})
    assert status == 404


def test_missing_key_is_validation_error(invoke):
    for method in ("POST", "GET", "PUT", "DELETE"):
        status, body = invoke(httpMethod=method, body={"name": "A"})
        assert status == 400
        assert body == {"error": "Missing id"}


def test_unsupported_action_and_method(invoke, store):
    status, body = invoke(action="purge", pathParameters={"id": "s1"})
    assert status == 400
    assert "purge" in body["error"]

    status, _ = invoke(httpMethod="PATCH", pathParameters={"id": "s1"})
    assert status == 400

    status, _ = invoke()
    assert status == 400
    assert len(store) == 0


def test_explicit_action_beats_method(invoke):
    invoke(httpMethod="POST", body={"id": "s1", "name": "A"})
    status, body = invoke(action="GeT", httpMethod="POST", pathParameters={"id": "s1"})
    assert status == 200
    assert body == {"id": "s1", "name": "A"}


def test_malformed_body_is_unexpected(invoke):
    status, body = invoke(httpMethod="POST", body="{broken")
    assert status == 500
    assert body["error"]


def test_store_failure_is_unexpected():
    store = mock.Mock()
    store.get.side_effect = RuntimeError("backend down")
    handler = RecordHandler(store, key_field="id")

    envelope = handler({"httpMethod": "GET", "pathParameters": {"id": "s1"}})

    assert envelope["statusCode"] == 500
    assert json.loads(envelope["body"]) == {"error": "backend down"}


def test_numeric_payload_key_is_stored_as_string(invoke, store):
    status, body = invoke(httpMethod="POST", body='{"id": 5, "name": "A"}')
    assert status == 201
    assert body["item"] == {"id": "5", "name": "A"}

    status, body = invoke(httpMethod="GET", pathParameters={"id": "5"})
    assert status == 200
    assert body == {"id": "5", "name": "A"}
    assert store.get(5) is None
