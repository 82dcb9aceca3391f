"""HTML chessboard shipped to MCP-UI capable hosts as an embedded resource."""

import json
from string import Template

from chess_mcp.protocol.content import EmbeddedResource, TextResourceContents

PREFERRED_FRAME_SIZE = ["500px", "500px"]

_BOARD_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <link rel="stylesheet"
        href="https://unpkg.com/@chrisoakman/chessboardjs@1.0.0/dist/chessboard-1.0.0.min.css"
        integrity="sha384-q94+BZtLrkL1/ohfjR8c6L+A6qzNH9R2hBLwyoAfu3i/WCvQjzL2RQJ3uNHDISdU"
        crossorigin="anonymous">
</head>
<body>
<div id="myBoard" style="width: 400px"></div>
<script src="https://code.jquery.com/jquery-3.5.1.min.js"
        integrity="sha384-ZvpUoO/+PpLXR1lu4jmpXWu80pZlYUAfxl5NsBMWOEPSjUn/6Z/hRTt8+pR6L4N2"
        crossorigin="anonymous"></script>
<script src="https://unpkg.com/@chrisoakman/chessboardjs@1.0.0/dist/chessboard-1.0.0.min.js"
        integrity="sha384-8Vi8VHwn3vjQ9eUHUxex3JSN/NFqUg3QbPyX8kWyb93+8AC/pPWTzj+nHtbC5bxD"
        crossorigin="anonymous"></script>
<script>
  var board = Chessboard('myBoard', {
    position: $position,
    pieceTheme: 'https://chessboardjs.com/img/chesspieces/wikipedia/{piece}.png',
    draggable: true,
    dropOffBoard: 'snapback',
    showNotation: true,
    onDrop: function (source, target) {
      window.parent.postMessage({
        type: 'tool',
        payload: {
          toolName: 'chess_move',
          params: {
            move: source + "-" + target
          }
        }
      }, '*')
    }
  })
</script>
</body>
</html>"""
)


def render_board_html(fen: str) -> str:
    # chessboard.js only wants the piece placement field
    placement = fen.split(" ", 1)[0]
    return _BOARD_TEMPLATE.substitute(position=json.dumps(placement))


def board_ui_resource(fen: str) -> EmbeddedResource:
    """Raw-HTML UI resource showing the position; dropping a piece asks the
    host to call `chess_move` with ``source-target`` notation."""
    return EmbeddedResource(
        resource=TextResourceContents(
            uri=f"ui://chess_board/{fen}",
            mime_type="text/html",
            text=render_board_html(fen),
            meta={"mcpui.dev/ui-preferred-frame-size": PREFERRED_FRAME_SIZE},
        )
    )
