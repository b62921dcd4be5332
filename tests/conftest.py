import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class SanctumHandler(BaseHTTPRequestHandler):
    """Set the XSRF cookie on the bootstrap path and record API requests."""

    def do_GET(self):
        if self.path == "/sanctum/csrf-cookie":
            self.send_response(204)
            self.send_header("Set-Cookie", "XSRF-TOKEN=tok%3D; Path=/")
            self.send_header("Set-Cookie", "laravel_session=s1; Path=/; HttpOnly")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        self._record_and_reply()

    def do_POST(self):
        length = int(self.headers.get("Content-Length") or 0)
        self.rfile.read(length)
        self._record_and_reply()

    def _record_and_reply(self):
        self.server.seen.append(
            {
                "path": self.path,
                "cookie": self.headers.get("Cookie"),
                "xsrf": self.headers.get("X-XSRF-TOKEN"),
            }
        )
        body = json.dumps({"ok": True}).encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def sanctum_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), SanctumHandler)
    server.seen = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
