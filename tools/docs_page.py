# =============================================================================
# tools/docs_page.py  -  HTML Usage Page
# =============================================================================
#
# Rendered at GET / from the same registry the catalog is served from, so
# the page can never drift from what tools/list returns.
# =============================================================================

from html import escape
from typing import Iterable

from core.models import ToolDescriptor

_STYLE = """
    body { font-family: -apple-system, 'Segoe UI', sans-serif; line-height: 1.6;
           max-width: 800px; margin: 0 auto; padding: 20px; color: #333; }
    h1, h2, h3 { color: #1a73e8; }
    code { background-color: #f5f5f5; padding: 2px 5px; border-radius: 3px; font-family: monospace; }
    pre { background-color: #f5f5f5; padding: 15px; border-radius: 5px; overflow-x: auto; }
    .endpoint { margin-bottom: 10px; padding: 10px; background-color: #e8f0fe;
                border-left: 4px solid #1a73e8; border-radius: 3px; }
    .tool { margin-bottom: 20px; padding: 15px; background-color: #f8f9fa;
            border-radius: 5px; border: 1px solid #dadce0; }
"""


def describe_parameters(descriptor: ToolDescriptor) -> str:
    """Plain-text parameter list, optional parameters marked."""
    if not descriptor.properties:
        return ""
    required = set(descriptor.required)
    lines = ["Parameters:"]
    for name, schema in descriptor.properties.items():
        marker = "" if name in required else " (optional)"
        lines.append(f"- {name}{marker}: {schema.get('description', '')}")
    return "\n".join(lines)


def _tool_html(descriptor: ToolDescriptor) -> str:
    return (
        '<div class="tool">'
        f"<h3>{escape(descriptor.name)}</h3>"
        f"<p>{escape(descriptor.description)}</p>"
        f"<pre>{escape(describe_parameters(descriptor))}</pre>"
        "</div>"
    )


def render_docs_page(descriptors: Iterable[ToolDescriptor], base_url: str) -> str:
    base = escape(base_url)
    tools_html = "\n".join(_tool_html(d) for d in descriptors)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>MCP Tool Server</title>
  <style>{_STYLE}</style>
</head>
<body>
  <h1>MCP Tool Server</h1>
  <p>A Model Context Protocol (MCP) server offering a set of utility tools.</p>

  <h2>Endpoints</h2>
  <div class="endpoint">
    <strong>SSE endpoint:</strong> <code>{base}/sse</code><br>
    <strong>Message endpoint:</strong> <code>{base}/message</code>
  </div>

  <h2>How to connect</h2>
  <ol>
    <li>Open your MCP client's settings</li>
    <li>Add a new MCP server of type SSE</li>
    <li>Use the SSE endpoint URL: <code>{base}/sse</code></li>
  </ol>

  <h2>Available tools</h2>
  {tools_html}
</body>
</html>
"""
