from chess_mcp.protocol.base import (
    INVALID_PARAMS,
    SERVER_ERROR,
    Error,
    build_response,
    error_envelope,
)
from chess_mcp.protocol.common import EmptyResult, PingRequest
from chess_mcp.protocol.tools import CallToolRequest


class TestRequestConversion:
    def test_from_protocol_flattens_params(self):
        # Arrange
        payload = {
            "jsonrpc": "2.0",
            "id": 7,
            "method": "tools/call",
            "params": {"name": "chess_move", "arguments": {"move": "e2e4"}},
        }

        # Act
        request = CallToolRequest.from_protocol(payload)

        # Assert
        assert request.method == "tools/call"
        assert request.name == "chess_move"
        assert request.arguments == {"move": "e2e4"}

    def test_from_protocol_accepts_missing_params(self):
        # Arrange
        payload = {"jsonrpc": "2.0", "id": 1, "method": "ping"}

        # Act
        request = PingRequest.from_protocol(payload)

        # Assert
        assert request.method == "ping"

    def test_to_protocol_nests_params_and_omits_empty(self):
        # Arrange
        request = CallToolRequest(name="chess_move", arguments={"move": "new"})

        # Act
        wire = request.to_protocol()
        ping_wire = PingRequest().to_protocol()

        # Assert
        assert wire == {
            "jsonrpc": "2.0",
            "method": "tools/call",
            "params": {"name": "chess_move", "arguments": {"move": "new"}},
        }
        assert ping_wire == {"jsonrpc": "2.0", "method": "ping"}


class TestResponses:
    def test_build_response_wraps_result(self):
        # Act
        response = build_response(3, EmptyResult())

        # Assert
        assert response == {"jsonrpc": "2.0", "id": 3, "result": {}}

    def test_build_response_wraps_error(self):
        # Arrange
        error = Error(code=INVALID_PARAMS, message="Unknown tool: x")

        # Act
        response = build_response("abc", error)

        # Assert
        assert response == {
            "jsonrpc": "2.0",
            "id": "abc",
            "error": {"code": -32602, "message": "Unknown tool: x"},
        }

    def test_error_envelope_has_null_id_by_default(self):
        # Act
        envelope = error_envelope(SERVER_ERROR, "Bad Request: No valid session ID provided")

        # Assert
        assert envelope == {
            "jsonrpc": "2.0",
            "error": {
                "code": -32000,
                "message": "Bad Request: No valid session ID provided",
            },
            "id": None,
        }

    def test_error_round_trips_through_response(self):
        # Arrange
        response = {"jsonrpc": "2.0", "id": 1, "error": {"code": -1, "message": "x"}}

        # Act
        error = Error.from_protocol(response)

        # Assert
        assert error.code == -1
        assert error.message == "x"
        assert error.data is None
