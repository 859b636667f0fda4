"""Static metadata describing QuizNight."""

APP_NAME = "QuizNight"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizNight is a party quiz toolkit: author trivia, movie, photo-year and guess-who "
    "questions, play them solo against the clock, or host a live game where players "
    "join from their phones."
)

HELP_TEXT = (
    "Question banks can be authored as plain text and imported at startup. "
    "Each block describes one question:\n\n"
    "KIND: trivia\n"
    "Q: What is the capital of France?\n"
    "ANSWER: Paris\n"
    "HINT: It has a famous iron tower\n\n"
    "---\n\n"
    "KIND: guess-who\n"
    "Q: Who is this?\n"
    "ANSWER: Ada Lovelace\n"
    "IMAGE: https://assets.example.org/ada-1.jpg\n"
    "IMAGE: https://assets.example.org/ada-2.jpg"
)
