"""Hello World — the simplest wren app.

Demonstrates regex routes, captured groups as handler arguments,
return-value negotiation, Response chaining, and a custom error handler.

Run:
    python app.py
"""

from html import escape

from wren import App, NotFound, Request, Response

app = App()


@app.route("GET", r"^$")
def index():
    return "Hello, World!"


@app.route("GET", r"^greet/([^/]+)$")
def greet(name: str):
    return f"Hello, {escape(name)}!"


@app.route("GET", r"^api/status$")
def status():
    return {"status": "ok", "version": "0.1.0"}


@app.route(None, r"^custom$")
def custom():
    return Response("Created").with_status(201).with_header("X-Custom", "wren")


def not_found(exc: Exception, request: Request):
    if isinstance(exc, NotFound):
        return f"Nothing at {escape(request.path)}"
    return Response("Something went wrong").with_status(500)


app.set_error_handler(not_found)


if __name__ == "__main__":
    app.run()
