"""HTML for the server-rendered pages.

The canvas editor itself is a browser application; these pages cover the
landing, auth boundary, dashboard and new-canvas form, the editor shell and
the read-only view of shared canvases.
"""

import json
from html import escape

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title} | MindGrid</title>
</head>
<body>
{body}
</body>
</html>
"""

LANDING_BODY = """<header>
  <nav><a href="/">MindGrid</a> <a href="/auth/login">Sign in</a></nav>
</header>
<main>
  <section id="hero">
    <p>Trusted by 10,000+ teams worldwide</p>
    <h1>Visualize ideas. Connect thinking. Execute with clarity.</h1>
    <p>MindGrid is a visual canvas for mind maps: text, images, links and
    synapse nodes that open into nested canvases, with AI assistance using
    your own OpenAI key.</p>
    <a href="/auth/login">Start Mapping Free</a>
  </section>
  <section id="cta">
    <h2>Ready to Transform Your Ideas?</h2>
    <p>Join thousands of teams already using MindGrid to visualize success and execute with clarity.</p>
    <a href="/auth/login">Start Your Free Trial</a>
    <p>No credit card required &bull; 14-day free trial &bull; Cancel anytime</p>
  </section>
</main>
"""

LOGIN_BODY = """<main>
  <h2>Sign in to MindGrid</h2>
  <p>Use the account you registered with. After signing in you will be taken
  to your dashboard.</p>
  <a href="/">Back to home</a>
</main>
"""

AUTH_ERROR_BODY = """<main>
  <h2>Authentication Error</h2>
  <p>There was an error during the authentication process. Please try again.</p>
  <a href="/auth/login">Back to Login</a>
</main>
"""


def render_page(title: str, body: str) -> str:
    return PAGE_TEMPLATE.format(title=escape(title), body=body)


def render_landing() -> str:
    return render_page("Visual mind mapping", LANDING_BODY)


def render_login() -> str:
    return render_page("Sign in", LOGIN_BODY)


def render_auth_error() -> str:
    return render_page("Authentication Error", AUTH_ERROR_BODY)


def render_dashboard(email, canvases) -> str:
    """Dashboard listing the user's top-level canvases."""
    if canvases:
        items = "\n".join(
            f'    <li><a href="/canvas/{escape(str(c["id"]))}">{escape(c["name"] or "")}</a></li>'
            for c in canvases
        )
        listing = f"  <ul>\n{items}\n  </ul>"
    else:
        listing = "  <p>No canvases yet.</p>"
    body = (
        "<main>\n"
        f"  <h1>Dashboard</h1>\n"
        f"  <p>Signed in as {escape(email or '')}</p>\n"
        '  <a href="/canvas/new">New Canvas</a>\n'
        f"{listing}\n"
        "</main>\n"
    )
    return render_page("Dashboard", body)


def render_new_canvas_form(folders, error=None, name="", description="", folder_id=None) -> str:
    """The "Create New Canvas" form, re-rendered with the error after a failure."""
    error_block = (
        f'  <div class="error"><p>{escape(error)}</p></div>\n' if error else ""
    )
    options = ['      <option value="">No folder</option>']
    for folder in folders:
        selected = " selected" if folder_id and str(folder["id"]) == str(folder_id) else ""
        options.append(
            f'      <option value="{escape(str(folder["id"]))}"{selected}>'
            f'{escape(folder["name"] or "")}</option>'
        )
    body = (
        "<main>\n"
        "  <h1>Create New Canvas</h1>\n"
        '  <form method="post" action="/canvas/new">\n'
        f"{error_block}"
        '    <label for="name">Canvas Name</label>\n'
        f'    <input type="text" id="name" name="name" required placeholder="My Thought Map" value="{escape(name or "")}">\n'
        '    <label for="description">Description (optional)</label>\n'
        f'    <textarea id="description" name="description" rows="3">{escape(description or "")}</textarea>\n'
        '    <label for="folder_id">Folder</label>\n'
        '    <select id="folder_id" name="folder_id">\n'
        + "\n".join(options)
        + "\n    </select>\n"
        '    <button type="submit">Create Canvas</button>\n'
        "  </form>\n"
        "</main>\n"
    )
    return render_page("New Canvas", body)


# ==============================================================================
# CANVAS PAGES
# ==============================================================================
CANVAS_BOOTSTRAP_SCRIPT = """<script>
(function () {
  var root = document.getElementById("canvas-root");
  fetch(root.dataset.graphUrl, {credentials: "same-origin"})
    .then(function (response) { return response.json(); })
    .then(function (graph) {
      window.dispatchEvent(new CustomEvent("mindgrid:graph-loaded", {detail: graph}));
    });
})();
</script>
"""


def embed_json(value) -> str:
    """JSON safe to place inside a <script> element."""
    return json.dumps(value).replace("</", "<\\/")


def render_canvas_page(canvas) -> str:
    """Shell for the canvas editor.

    The editor loads the graph from ``/api/canvas/<id>`` and saves it back to
    ``/api/canvas/<id>/graph``.
    """
    canvas_id = escape(str(canvas["id"]))
    body = (
        "<header>\n"
        '  <nav><a href="/dashboard">Dashboard</a></nav>\n'
        f"  <h1>{escape(canvas.get('name') or '')}</h1>\n"
        "</header>\n"
        "<main>\n"
        f'  <div id="canvas-root" data-canvas-id="{canvas_id}"'
        f' data-graph-url="/api/canvas/{canvas_id}"'
        f' data-save-url="/api/canvas/{canvas_id}/graph"></div>\n'
        "</main>\n"
        f"{CANVAS_BOOTSTRAP_SCRIPT}"
    )
    return render_page(canvas.get("name") or "Canvas", body)


def render_canvas_not_found() -> str:
    body = (
        "<main>\n"
        "  <h1>Canvas Not Found</h1>\n"
        "  <p>This canvas does not exist or you do not have access to it.</p>\n"
        '  <a href="/dashboard">Back to Dashboard</a>\n'
        "</main>\n"
    )
    return render_page("Canvas Not Found", body)


def render_shared_canvas(canvas, nodes, edges) -> str:
    """Read-only view of a public canvas with its graph embedded."""
    graph = {
        "canvas": {"id": str(canvas["id"]), "name": canvas.get("name")},
        "nodes": nodes,
        "edges": edges,
    }
    body = (
        "<header>\n"
        f"  <h1>{escape(canvas.get('name') or '')}</h1>\n"
        "  <span>Shared Mind Map</span>\n"
        "  <span>Read-only view</span>\n"
        '  <a href="/">Create Your Own</a>\n'
        "</header>\n"
        "<main>\n"
        '  <div id="canvas-root" data-read-only="true"></div>\n'
        f'  <script type="application/json" id="canvas-data">{embed_json(graph)}</script>\n'
        "</main>\n"
    )
    return render_page(canvas.get("name") or "Shared Mind Map", body)


def render_shared_canvas_error(message) -> str:
    body = (
        "<main>\n"
        "  <h1>Mind Map Not Found</h1>\n"
        f"  <p>{escape(message)}</p>\n"
        '  <a href="/">Go to Home</a>\n'
        "</main>\n"
    )
    return render_page("Mind Map Not Found", body)
