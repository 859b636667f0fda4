"""Application entry point for QuizNight."""

from __future__ import annotations

import os
import socket
import sys

from PySide6.QtWidgets import QApplication

from quiz_night.backend import create_memory_backend
from quiz_night.constants.backend_constants import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD
from quiz_night.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_night.constants.quiz_constants import SAMPLE_QUESTIONS_PATH
from quiz_night.core.quiz_importer import QuizImportError
from quiz_night.core.quiz_manager import QuizManager
from quiz_night.server.api_server import start_api_server
from quiz_night.ui.host_main_window import HostMainWindow
from quiz_night.utils.logging_config import configure_logging


def _determine_base_url(port: int) -> str:
    """Best-effort determination of the local IP for the player-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}"


def main() -> None:
    """Initialize logging, seed the backend, start the API server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting QuizNight…")

    base_url = _determine_base_url(DEFAULT_PORT)
    backend = create_memory_backend(public_base_url=base_url)
    admin_email = os.environ.get("QUIZ_NIGHT_ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    admin_password = os.environ.get("QUIZ_NIGHT_ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    backend.auth.register_user(admin_email, admin_password)

    quiz_manager = QuizManager(backend, public_base_url=base_url)
    try:
        quiz_manager.import_questions_from_file(SAMPLE_QUESTIONS_PATH)
    except (OSError, QuizImportError) as exc:
        logger.warning("Sample questions not loaded: %s", exc)

    host_session = quiz_manager.auth.sign_in(admin_email, admin_password)
    start_api_server(quiz_manager=quiz_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)
    logger.info("Player page available at %s/", base_url)

    app = QApplication(sys.argv)
    window = HostMainWindow(quiz_manager=quiz_manager, host_id=host_session.user_id, player_url=f"{base_url}/")
    window.show()
    exit_code = app.exec()
    quiz_manager.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
