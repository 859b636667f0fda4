"""Quiz-related constants shared across UI and core layers."""

from pathlib import Path

DEFAULT_TIME_LIMIT_SECONDS: int = 30
TIMER_TICK_INTERVAL_SECONDS: float = 1.0
TIMER_WARNING_THRESHOLD_SECONDS: int = 10

# Per-kind countdowns used by the solo games.
KIND_TIME_LIMIT_SECONDS: dict[str, int] = {
    "trivia": 15,
    "movie": 20,
    "photo-year": 20,
    "guess-who": 20,
}
DEFAULT_PLAY_QUESTION_LIMIT: int = 10

MAX_PLAYERS_PER_GAME: int = 30
MAX_NICKNAME_LENGTH: int = 12
RANDOM_NAME_MAX_ATTEMPTS: int = 10
POINTS_PER_CORRECT_ANSWER: int = 1

DEFAULT_SESSION_SETTINGS: dict[str, object] = {
    "allow_late_join": True,
    "question_timer": DEFAULT_TIME_LIMIT_SECONDS,
    "randomize_questions": False,
    "show_results_after_each": True,
    "countdown_before_question": 3,
}

BUZZER_WRONG_ANSWER: str = "[buzzer]"

NICKNAME_ADJECTIVES: tuple[str, ...] = (
    "Happy",
    "Zippy",
    "Jolly",
    "Witty",
    "Brave",
    "Sunny",
    "Lucky",
    "Merry",
    "Fuzzy",
    "Swift",
)
# Combined with one adjective and a space these stay within MAX_NICKNAME_LENGTH.
NICKNAME_NOUNS: tuple[str, ...] = (
    "Tiger",
    "Puppy",
    "Kitten",
    "Rabbit",
    "Panda",
    "Turtle",
    "Fox",
    "Lion",
    "Otter",
    "Koala",
)

SAMPLE_QUESTIONS_PATH: Path = Path(__file__).resolve().parents[1] / "data" / "sample_questions.txt"

# Solo runs served over HTTP are dropped once idle or finished for this long.
SOLO_RUN_IDLE_SECONDS: float = 30 * 60
FINISHED_SOLO_RUN_TTL_SECONDS: float = 5 * 60
MAX_SOLO_RUNS: int = 200
