# wsgi.py
"""
Entrypoint for gunicorn/eventlet (`wsgi:app`). APP_ENV picks the config
class: production, development or testing.
"""
import os

from app import create_app
from config import config_for
from realtime import socketio

app = create_app(config_for())

if __name__ == "__main__":
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        allow_unsafe_werkzeug=app.config.get("DEBUG", False),
    )
