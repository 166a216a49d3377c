"""Точка входа контейнера: dev-сервер Flask на ADDRESS:PORT."""
from __future__ import annotations

from app import create_app

app = create_app()


if __name__ == "__main__":
    # WORKERS=0: один процесс с потоками
    app.run(
        host=app.config["ADDRESS"],
        port=app.config["PORT"],
        threaded=app.config["WORKERS"] == 0,
        processes=max(app.config["WORKERS"], 1),
    )
