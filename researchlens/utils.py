import os
import re
import time
import unicodedata
from datetime import date


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in {"1", "true", "yes", "on"}


# ======================= Logger Class =======================
class Logger:
    def __init__(self):
        self.printed_messages = set()

    def _write(self, message: str):
        log_file = os.getenv("RL_LOG_FILE")
        if not log_file:
            return
        try:
            with open(log_file, "a", encoding="utf-8") as fh:
                fh.write(message + "\n")
        except OSError:
            pass

    def log(self, msg, once=False):
        """
        Print a timestamped message.
        If once=True, the message is only printed once per session.
        """
        if once:
            msg_hash = hash(msg)
            if msg_hash in self.printed_messages:
                return
            self.printed_messages.add(msg_hash)
        full_message = f"{time.strftime('%Y-%m-%d %H:%M:%S')} - {msg}"
        print(full_message)
        self._write(full_message)

    def debug(self, msg):
        if _env_flag("RL_DEBUG"):
            self.log(f"[DEBUG] {msg}")


logger = Logger()


# ======================= Text Cleaning Functions =======================
PAT_WHITESPACE = re.compile(r"[ \u00A0\u1680\u2000-\u200B\u202F\u205F\u3000]+")


def clean_query(text) -> str:
    """
    Normalise a free-text research query:
    - Unicode NFKC normalisation (full-width dashes, ligatures);
    - control characters become spaces, format characters are dropped;
    - collapse runs of whitespace.

    Case is preserved; the classifier lower-cases on its own.
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    text = unicodedata.normalize("NFKC", text)
    text = "".join(" " if unicodedata.category(ch) == "Cc" else ch for ch in text if unicodedata.category(ch) not in {"Cf", "Cs", "Co", "Cn"})
    text = PAT_WHITESPACE.sub(" ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text


def title_case_words(text: str) -> str:
    # Upper-cases the first letter of every word, leaving the rest untouched
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), text)


# ======================= Dates =======================
def next_quarters(reference: date, count: int = 5) -> list[str]:
    """
    Labels for `count` consecutive quarters starting with the quarter after
    the one containing `reference`, formatted like ``Q3-2026``.
    """
    quarter = (reference.month - 1) // 3 + 1
    year = reference.year
    labels = []
    for _ in range(count):
        quarter += 1
        if quarter > 4:
            quarter = 1
            year += 1
        labels.append(f"Q{quarter}-{year}")
    return labels
