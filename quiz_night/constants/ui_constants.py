"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "QuizNight Host Console"
PLAYER_URL_PLACEHOLDER: str = "http://<host-ip>:8000/"
SESSION_REFRESH_INTERVAL_MS: int = 1000

TAB_HOST: str = "Host Game"
TAB_PRACTICE: str = "Practice"

HOST_CREATE_BUTTON: str = "Create Game"
HOST_START_BUTTON: str = "Start Game"
HOST_NEXT_BUTTON: str = "Next Question"
HOST_RESULTS_BUTTON: str = "Show Results"
HOST_END_BUTTON: str = "End Game"
HOST_WRONG_BUTTON: str = "Buzzer: Wrong"
HOST_NO_SESSION: str = "No game created yet."
HOST_PLAYERS_TEMPLATE: str = "{count} player(s)"

PRACTICE_START_BUTTON: str = "Start"
PRACTICE_SUBMIT_BUTTON: str = "Submit"
PRACTICE_NEXT_BUTTON: str = "Next"
PRACTICE_RESET_BUTTON: str = "Reset"
PRACTICE_ANSWER_PLACEHOLDER: str = "Type your answer"

NO_QUESTIONS_MESSAGE: str = "The question bank is empty. Add questions first."
QUIZ_COMPLETE_TEMPLATE: str = "Quiz complete: {score} / {total}"

PRACTICE_REFRESH_INTERVAL_MS: int = 250
PRACTICE_NEW_BUTTON: str = "New Game"
PRACTICE_REVEAL_BUTTON: str = "Show Answer"
PRACTICE_KIND_ALL: str = "All kinds"
PRACTICE_TIMED_CHECKBOX: str = "Countdown"
PRACTICE_SCORING_CHECKBOX: str = "Keep score"

GAME_NAME_PLACEHOLDER: str = "Game name"
DEFAULT_GAME_NAME: str = "Quiz Night"
