"""Unit tests for the generic request helper and the CRUD function factories."""

from unittest.mock import patch

import pytest

from cmrtransmit.core import http_helper
from cmrtransmit.core.exceptions import (
    TransmitInternalError,
    TransmitInvalidDataError,
    TransmitNotFoundError,
)

APP = "access-control"


def _groups_url(conn):
    return f"{conn.root_url}/groups"


def _group_url(conn, concept_id):
    return f"{conn.root_url}/groups/{concept_id}"


def _requested_url(transmit, mock_rest_call):
    """Evaluates the url function passed to rest_call."""
    app_name, _, url_fn = mock_rest_call.call_args[0]
    return url_fn(transmit.app_connection(app_name))


class TestRequest:
    def test_returns_body(self, transmit, make_json_response):
        # GIVEN the application answers with JSON
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200, {"hits": 0})
        ) as mock_rest_call:
            # WHEN I make a request
            result = http_helper.request(
                APP,
                url_fn=_groups_url,
                method="get",
                http_options={"params": {"name": "g"}},
                transmit_client=transmit,
            )

        # THEN the decoded body is returned
        assert result == {"hits": 0}
        mock_rest_call.assert_called_once_with(
            APP,
            "get",
            _groups_url,
            use_system_token=False,
            token=None,
            params={"name": "g"},
        )

    def test_raw_returns_response(self, transmit, make_json_response):
        response = make_json_response(500, {"errors": ["boom"]})
        with patch.object(transmit, "rest_call", return_value=response):
            result = http_helper.request(
                APP,
                url_fn=_groups_url,
                method="get",
                raw=True,
                transmit_client=transmit,
            )
        assert result is response

    def test_raises_with_errors(self, transmit, make_json_response):
        with patch.object(
            transmit,
            "rest_call",
            return_value=make_json_response(400, {"errors": ["bad name"]}),
        ):
            with pytest.raises(TransmitInvalidDataError) as ex:
                http_helper.request(
                    APP, url_fn=_groups_url, method="post", transmit_client=transmit
                )
        assert ex.value.errors == ["bad name"]

    def test_no_content(self, transmit, make_json_response):
        with patch.object(transmit, "rest_call", return_value=make_json_response(204)):
            assert (
                http_helper.request(
                    APP, url_fn=_groups_url, method="delete", transmit_client=transmit
                )
                is None
            )

    def test_uses_cached_client(self, transmit, make_json_response):
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200, [])
        ) as mock_rest_call:
            http_helper.request(APP, url_fn=_groups_url, method="get")
        mock_rest_call.assert_called_once()


class TestFactories:
    def test_creator(self, transmit, make_json_response):
        create_group = http_helper.make_creator(APP, _groups_url)
        with patch.object(
            transmit,
            "rest_call",
            return_value=make_json_response(200, {"concept_id": "AG1-CMR"}),
        ) as mock_rest_call:
            result = create_group(
                {"name": "g"}, token="user-token", transmit_client=transmit
            )

        assert result == {"concept_id": "AG1-CMR"}
        kwargs = mock_rest_call.call_args[1]
        assert kwargs["body"] == {"name": "g"}
        assert kwargs["token"] == "user-token"
        assert mock_rest_call.call_args[0][1] == "post"

    def test_updater(self, transmit, make_json_response):
        update_group = http_helper.make_updater(APP, _group_url)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200, {})
        ) as mock_rest_call:
            update_group("AG1-CMR", {"name": "g2"}, transmit_client=transmit)

        assert mock_rest_call.call_args[0][1] == "put"
        assert mock_rest_call.call_args[1]["body"] == {"name": "g2"}
        assert _requested_url(transmit, mock_rest_call) == (
            "http://localhost:3011/groups/AG1-CMR"
        )

    def test_destroyer(self, transmit, make_json_response):
        delete_group = http_helper.make_destroyer(APP, _group_url)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200, {})
        ) as mock_rest_call:
            delete_group("AG1-CMR", transmit_client=transmit)

        assert mock_rest_call.call_args[0][1] == "delete"
        assert _requested_url(transmit, mock_rest_call).endswith("/groups/AG1-CMR")

    def test_getter_not_found_is_none(self, transmit, make_json_response):
        get_group = http_helper.make_getter(APP, _group_url)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(404, {"errors": []})
        ):
            assert get_group("AG1-CMR", transmit_client=transmit) is None

    def test_getter_raises_other_errors(self, transmit, make_json_response):
        get_group = http_helper.make_getter(APP, _group_url)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(500, {"errors": []})
        ):
            with pytest.raises(TransmitInternalError):
                get_group("AG1-CMR", transmit_client=transmit)

    def test_searcher(self, transmit, make_json_response):
        search_for_groups = http_helper.make_searcher(APP, _groups_url)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200, {"items": []})
        ) as mock_rest_call:
            result = search_for_groups({"provider": "PROV1"}, transmit_client=transmit)

        assert result == {"items": []}
        assert mock_rest_call.call_args[1]["params"] == {"provider": "PROV1"}

    def test_searcher_not_found_raises(self, transmit, make_json_response):
        search_for_groups = http_helper.make_searcher(APP, _groups_url)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(404, {"errors": []})
        ):
            with pytest.raises(TransmitNotFoundError):
                search_for_groups(transmit_client=transmit)

    def test_cache_clearer_uses_system_token(self, transmit, make_json_response):
        clear_cache = http_helper.make_cache_clearer(APP)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200)
        ) as mock_rest_call:
            clear_cache(transmit_client=transmit)

        assert mock_rest_call.call_args[1]["use_system_token"] is True
        assert _requested_url(transmit, mock_rest_call) == (
            "http://localhost:3011/caches/clear-cache"
        )

    def test_resetter(self, transmit, make_json_response):
        reset = http_helper.make_resetter("cubby")
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(204)
        ) as mock_rest_call:
            reset(transmit_client=transmit)

        assert mock_rest_call.call_args[0][1] == "post"
        assert _requested_url(transmit, mock_rest_call) == "http://localhost:3007/reset"

    def test_healther(self, transmit, make_json_response):
        get_health = http_helper.make_healther(APP)
        with patch.object(
            transmit, "rest_call", return_value=make_json_response(200, {"db": "ok"})
        ):
            assert get_health(transmit_client=transmit) == {
                "ok?": True,
                "dependencies": {"db": "ok"},
            }

    def test_healther_problem(self, transmit, make_json_response):
        get_health = http_helper.make_healther(APP)
        with patch.object(
            transmit,
            "rest_call",
            return_value=make_json_response(503, {"db": "unreachable"}),
        ):
            assert get_health(transmit_client=transmit) == {
                "ok?": False,
                "problem": {"db": "unreachable"},
            }
