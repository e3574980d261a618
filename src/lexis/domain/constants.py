"""Centralized constants for the lexis scheduling engine.

Every scheduling constant and priority weight lives here so the review
engine, the planner and the session layer import from one source of truth.
The weights are tuning policy; the ordering they produce (due first, then
failure rate, ladder position, short interval, overdue days) is the contract.
"""

# ---------- Review State ----------
INTERVAL_LADDER: tuple[int, ...] = (1, 3, 7, 14, 30, 60)
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASS_THRESHOLD = 3
FAILED_INTERVAL_DAYS = 1

# ---------- Ratings ----------
RATING_QUALITY: dict[str, int] = {
    "again": 1,
    "hard": 3,
    "good": 4,
    "easy": 5,
}
DEFAULT_RATING_QUALITY = 3

# ---------- Weak Items ----------
WEAK_MIN_REVIEWS = 3
WEAK_FAILURE_RATE = 0.3
FOCUS_MIN_REVIEWS = 2
FOCUS_FAILURE_RATE = 0.25
DEFAULT_WEAK_LIST_SIZE = 10

# ---------- Priority Weights ----------
DUE_WEIGHT = 1000.0
FAILURE_RATE_WEIGHT = 250.0
LADDER_POSITION_WEIGHT = 12.0
LADDER_POSITION_CAP = 5
SHORT_INTERVAL_WEIGHT = 8.0
SHORT_INTERVAL_CAP = 2
OVERDUE_DAY_WEIGHT = 2.0

# ---------- Interleaving ----------
DEFAULT_GROUP_KEY = "general"

# ---------- Session ----------
DEFAULT_SESSION_LIMIT = 1000
DEFAULT_BATCH_SIZE = 20
DEFAULT_DAILY_GOAL = 20
XP_EXCELLENT = 15  # quality >= 4
XP_PASSED = 10  # quality == 3
XP_FAILED = 5

# ---------- Leitner / Mastery ----------
LEITNER_BOX_LIMITS: tuple[int, ...] = (0, 2, 5, 9)
MASTERY_LEVELS: tuple[tuple[str, int], ...] = (
    ("New", 0),
    ("Learning", 1),
    ("Familiar", 3),
    ("Known", 6),
    ("Mastered", 10),
)

# ---------- Insights ----------
GROUP_DUE_WEIGHT = 3
GROUP_WEAK_WEIGHT = 4
GROUP_PROGRESS_WEIGHT = 2
CATCHUP_BOOST_CAP = 15
WEAK_BOOST_CAP = 10

# ---------- Identifiers ----------
ITEM_ID_PREFIX = "vocab_"
