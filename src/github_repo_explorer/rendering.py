"""HTML page rendering for the explorer."""

from jinja2 import Environment, PackageLoader

from .views import ViewSession

# Set up Jinja2 environment
_jinja_env = Environment(
    loader=PackageLoader("github_repo_explorer", "templates"),
    autoescape=True,
)

CSS = """
:root {
    --bg-color: #1e1e1e;
    --panel-color: #252526;
    --border-color: #3c3c3c;
    --text-color: #d4d4d4;
    --heading-color: #cccccc;
    --accent-color: #0e639c;
    --selected-color: #094771;
}
body { margin: 0; padding: 0; background: var(--bg-color); color: var(--text-color);
       font-family: "Segoe UI", Tahoma, sans-serif; font-size: 14px; }
.app { display: flex; height: 100vh; }
.left-panel { background: var(--panel-color); border-right: 1px solid var(--border-color);
              padding: 10px; overflow-y: auto; width: 300px; min-width: 150px; resize: horizontal; }
.left-panel h2, .right-panel h2 { color: var(--heading-color); margin: 0 0 10px;
              padding-bottom: 5px; border-bottom: 1px solid var(--border-color); }
.right-panel { flex: 1; padding: 20px; overflow-y: auto; }
.node-label { padding: 4px 8px; border-radius: 3px; cursor: pointer; white-space: pre; }
.node-label.selected { background: var(--selected-color); color: #ffffff; }
.node-label.highlighted { font-weight: bold; }
button { background: var(--accent-color); border: none; color: #ffffff; padding: 6px 12px;
         border-radius: 3px; cursor: pointer; font-size: 14px; }
input[type="text"], textarea, .visual-editor { background: var(--bg-color); color: var(--text-color);
         border: 1px solid var(--border-color); border-radius: 3px; padding: 6px; font-size: 14px; }
textarea { width: 100%; height: 300px; font-family: Consolas, "Courier New", monospace; }
.visual-editor { min-height: 300px; }
.commit-area { margin-top: 10px; }
.commit-area input[type="text"] { width: 60%; margin-right: 10px; }
.notice { background: #5a1d1d; border: 1px solid #be1100; padding: 8px; margin-bottom: 10px; }
.error { color: #f48771; }
pre { padding: 10px; border-radius: 3px; overflow: auto; }
.preview-image { max-width: 100%; max-height: calc(100vh - 150px); object-fit: contain; }
"""


def get_template(name: str):
    """Get a Jinja2 template by name."""
    return _jinja_env.get_template(name)


def render_index(view: ViewSession, title: str) -> str:
    """Render the explorer page for one browser's view state."""
    return get_template("index.html").render(
        css=CSS,
        title=title,
        rows=view.navigator.rows(),
        session=view.session,
        notice=view.notice,
    )


def render_error_page(message: str) -> str:
    """Render the full-page error shown when the repository cannot be loaded."""
    return get_template("error.html").render(css=CSS, message=message)
