"""Names used when talking to the backend platform."""

TABLE_QUESTIONS: str = "game_questions"
TABLE_GAME_SESSIONS: str = "game_sessions"
TABLE_PLAYERS: str = "game_players"
TABLE_PLAYER_ANSWERS: str = "player_answers"

BUCKET_GAME_ASSETS: str = "game_assets"
PUBLIC_OBJECT_PREFIX: str = "/storage/v1/object/public/"
DEFAULT_PUBLIC_BASE_URL: str = "http://127.0.0.1:8000"

DEFAULT_ADMIN_EMAIL: str = "admin@quiznight.local"
DEFAULT_ADMIN_PASSWORD: str = "quiznight"
PASSWORD_RESET_REDIRECT_PATH: str = "/reset-password"
