"""
Entrypoint for running the API in development:  python -m api
In production run it via a WSGI server, e.g. gunicorn "api:create_app()".
"""
import os
from . import create_app

# APP_ENV selects the configuration (handled in get_config())
app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_RUN_PORT", "8000"))
    debug = bool(os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", True))).lower() in ("1", "true", "yes"))
    # the reloader would start a second cleanup thread
    app.run(host=host, port=port, debug=debug, use_reloader=False)
