"""Todo List — controllers, active-record models and JSON config.

Demonstrates:
1. A ``Model`` dataclass persisted to SQLite (add / update / delete)
2. A ``Controller`` whose declared actions are wired to regex routes
3. HTML and JSON views, redirects, and layered JSON config files

Add todos, restart the server, and they're still there.

Run:
    python app.py
"""

import os
from dataclasses import dataclass
from pathlib import Path

from wren import App, AppConfig, ConfigTree, Controller, NotFound, Request, action
from wren.data import Model

HERE = Path(__file__).parent
TEMPLATES_DIR = HERE / "templates"
CONFIG_DIR = HERE / "config"
DB_PATH = Path(os.environ.get("WREN_TODO_DB", str(HERE / "todo.db")))

SCHEMA = """
CREATE TABLE IF NOT EXISTS todos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    done INTEGER NOT NULL DEFAULT 0
);
"""

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class Todo(Model):
    __table__ = "todos"

    text: str = ""
    done: bool = False


# ---------------------------------------------------------------------------
# App — config/local.json, when present, overrides config/default.json
# ---------------------------------------------------------------------------

settings = ConfigTree()
settings.load(CONFIG_DIR / "default.json")
if (CONFIG_DIR / "local.json").exists():
    settings.load(CONFIG_DIR / "local.json")

app = App(
    AppConfig(template_dir=TEMPLATES_DIR, database_url=f"sqlite:///{DB_PATH}"),
    settings=settings,
)
app.db.execute_script(SCHEMA)


@app.template_global()
def site_title() -> str:
    return app.settings.get("site.title")


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class TodoController(Controller):
    def _todo(self, todo_id: str) -> Todo:
        todo = Todo.get_by_id(self.app.db, todo_id)
        if todo is None:
            raise NotFound(f"No todo {todo_id}")
        return todo

    @action
    def index(self):
        return self.html_view("todos/index.html", todos=Todo.get_all(self.app.db))

    @action
    def show(self, todo_id: str):
        return self.json_view(todo=self._todo(todo_id))

    @action
    def latest(self):
        count = self.app.settings.get("site.latest_count")
        return self.json_view(todos=Todo.get_latest(self.app.db, count))

    @action
    def create(self):
        text = str(self.input.get("text") or "").strip()
        if not text:
            return self.json_view(error="Todo text is required"), 422
        Todo.add(self.app.db, Todo(text=text))
        return self.redirect("/")

    @action
    def toggle(self, todo_id: str):
        todo = self._todo(todo_id)
        todo.done = not todo.done
        return self.json_view(todo=Todo.update(self.app.db, todo))

    @action
    def delete(self, todo_id: str):
        todo = Todo.delete(self.app.db, self._todo(todo_id))
        return self.json_view(deleted=todo.id)

    @action
    def clear(self):
        Todo.delete_all(self.app.db)
        return self.redirect("/", 303)


# ---------------------------------------------------------------------------
# Routes — checked newest first
# ---------------------------------------------------------------------------

app.add_route("GET", r"^$", TodoController.route("index"))
app.add_route("GET", r"^todos/(\d+)$", TodoController.route("show"))
app.add_route("GET", r"^todos/latest$", TodoController.route("latest"))
app.add_route("POST", r"^todos$", TodoController.route("create"))
app.add_route("POST", r"^todos/(\d+)/toggle$", TodoController.route("toggle"))
app.add_route("DELETE", r"^todos/(\d+)$", TodoController.route("delete"))


@app.route("POST", r"^actions/(\w+)$")
def run_action(name: str, request: Request, app: App):
    """Run any declared action by name; anything else is a 404."""
    return TodoController(request, app=app).call(name)


if __name__ == "__main__":
    app.run()
