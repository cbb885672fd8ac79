# hickory/wsgi.py
import eventlet

# must run before anything else imports socket/threading
eventlet.monkey_patch()

from hickory.infrastructure.realtime.socketio_server import socketio  # noqa: E402
from hickory.main import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    # production runs under gunicorn; this is for direct execution
    socketio.run(app, host="0.0.0.0", port=5000)
