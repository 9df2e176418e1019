"""Root landing page with API links."""

from html import escape


def render_root_page(app_name: str, app_version: str) -> str:
    """Return HTML for the root landing page."""
    name = escape(app_name)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{name}</title>
    <style>
        body {{
            font-family: system-ui, sans-serif;
            margin: 0;
            padding: 3rem 1rem;
            background: #111;
            color: #ddd;
        }}
        main {{ max-width: 520px; margin: 0 auto; }}
        h1 {{ color: #fff; font-weight: 600; margin-bottom: 0.25rem; }}
        .version {{ color: #888; font-size: 0.9rem; }}
        ul {{ list-style: none; padding: 0; }}
        li {{ margin: 0.6rem 0; }}
        a {{ color: #8ab4f8; text-decoration: none; }}
        code {{ color: #bbb; }}
    </style>
</head>
<body>
<main>
    <h1>{name}</h1>
    <div class="version">v{escape(app_version)}</div>
    <p>Shared task list with live queries.</p>
    <ul>
        <li><a href="/docs">Interactive API docs</a></li>
        <li><a href="/redoc">ReDoc</a></li>
        <li><a href="/api/v1/health">Health</a></li>
        <li>Live queries: <code>ws://&lt;host&gt;/api/v1/ws?token=&lt;jwt&gt;</code></li>
    </ul>
</main>
</body>
</html>
"""
