"""
Tests for the page router
"""
import pytest

from contactbook.core.routing import NOT_FOUND, RequestContext, Router


def _recorder(calls, name):
    def handler(params, request):
        calls.append((name, params, request))
        return name
    return handler


def test_placeholder_binds_path_segment():
    calls = []
    router = Router()
    router.register("GET", "/contacts/edit/{id}", _recorder(calls, "edit"))

    result = router.dispatch("GET", "/contacts/edit/42")

    assert result == "edit"
    assert calls[0][1] == {"id": "42"}


def test_method_mismatch_is_not_found():
    calls = []
    router = Router()
    router.register("GET", "/contacts/edit/{id}", _recorder(calls, "edit"))

    assert router.dispatch("POST", "/contacts/edit/42") is NOT_FOUND
    assert calls == []


def test_unknown_path_is_not_found_and_falsy():
    router = Router()
    router.get("/contacts", lambda params, request: "list")

    result = router.dispatch("GET", "/people")

    assert result is NOT_FOUND
    assert not result


def test_first_registered_route_wins():
    calls = []
    router = Router()
    router.get("/contacts/create", _recorder(calls, "create"))
    router.get("/contacts/{id}", _recorder(calls, "show"))

    assert router.dispatch("GET", "/contacts/create") == "create"
    assert router.dispatch("GET", "/contacts/7") == "show"
    assert calls[1][1] == {"id": "7"}


def test_segment_count_must_be_equal():
    router = Router()
    router.get("/contacts/edit/{id}", lambda params, request: "edit")

    assert router.dispatch("GET", "/contacts/edit") is NOT_FOUND
    assert router.dispatch("GET", "/contacts/edit/1/extra") is NOT_FOUND


def test_literal_segments_are_case_sensitive():
    router = Router()
    router.get("/contacts", lambda params, request: "list")

    assert router.dispatch("GET", "/Contacts") is NOT_FOUND
    assert router.dispatch("GET", "/contacts") == "list"


def test_multiple_placeholders():
    router = Router()
    router.get("/groups/{group}/members/{member}", lambda params, request: params)

    assert router.dispatch("GET", "/groups/friends/members/ana") == {
        "group": "friends",
        "member": "ana",
    }


def test_root_route_matches_only_root():
    router = Router()
    router.get("/", lambda params, request: "home")

    assert router.dispatch("GET", "/") == "home"
    assert router.dispatch("GET", "/contacts") is NOT_FOUND


def test_handler_receives_request_context():
    calls = []
    router = Router()
    router.post("/contacts/create", _recorder(calls, "create"))
    ctx = RequestContext(method="POST", path="/contacts/create", body={"name": "Ana"})

    router.dispatch("POST", "/contacts/create", ctx)

    assert calls[0][2] is ctx
    assert calls[0][2].body["name"] == "Ana"


def test_duplicate_placeholder_names_rejected():
    router = Router()
    with pytest.raises(ValueError):
        router.get("/a/{id}/b/{id}", lambda params, request: None)


def test_match_returns_route_and_params():
    router = Router()
    route = router.get("/contacts/delete/{id}", lambda params, request: None)

    found = router.match("GET", "/contacts/delete/3")

    assert found == (route, {"id": "3"})
    assert router.match("GET", "/contacts/delete") is None
