# Game Mode Constants
PLAYERS_PER_COURT = 4
PLAYERS_PER_TEAM = 2
DEFAULT_NUM_COURTS = 2

# Elo Rating Constants
DEFAULT_RATING = 1200.0
MIN_RATING = 100.0
MAX_RATING = 3000.0
ELO_SCALE = 400.0  # Logistic divisor for expected score
WIN_RATE_RATING_SPAN = 1000.0  # Rating points spanned by a 0-100% win rate

# K-factor Constants
K_FACTOR_NEW_PLAYER = 40.0
K_FACTOR_BASE = 32.0
K_FACTOR_EXPERIENCED = 16.0
CALIBRATION_MATCHES = 10
EXPERIENCED_MATCHES = 100

# Confidence Constants
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 1.0
DEFAULT_CONFIDENCE = 1.0
CALIBRATION_CONFIDENCE_STEP = 0.02  # 0.5 at match 0 -> 0.68 at match 9
CONFIDENCE_STEP = 0.01  # Post-calibration nudge per win/loss

# Smart Matching Constants
TEAM_RATING_TOLERANCE = 250.0  # Max acceptable team rating gap
MAX_RATING_DIFF = 500.0  # Max acceptable spread of individual ratings
MAX_REPEATED_PARTNERSHIPS = 2
PARTNERSHIP_MEMORY = 5  # Number of most recent matches considered "recent"
FAIR_PLAY_BASE_PENALTY = 0.1  # Per extra match over the pool minimum
FAIR_PLAY_VARIANCE_PENALTY = 0.5  # Per unit of match-count variance
FAIR_PLAY_VETO_THRESHOLD = 0.1
FAIR_PLAY_VETO_SPREAD = 1  # Pool spread must exceed this for the veto
RANDOM_TOP_FRACTION = 0.25  # Share of ranked candidates eligible for shuffles

DEFAULT_WEIGHTS = {
    "rating_balance": 0.15,
    "skill_similarity": 0.15,
    "partnership_variety": 0.2,
    "opponent_variety": 0.2,
    "fair_play": 0.3,
}

# Match Preview Constants
VERY_BALANCED_DIFF = 100
UNBALANCED_DIFF = 200
VERY_UNBALANCED_DIFF = 400

# Rating Tier Constants (ordered low to high, evenly spaced over the rating range)
RATING_TIERS = [
    ("Unrated", "#95A5A6", "❓"),
    ("Novice", "#DDA0DD", "🥚"),
    ("Learning", "#E67E22", "📚"),
    ("Beginner", "#F1B40F", "🌱"),
    ("Improving", "#F39C12", "📈"),
    ("Intermediate", "#96CEB4", "🌟"),
    ("Advanced", "#45B7D1", "🎯"),
    ("Expert", "#4ECDC4", "⭐"),
    ("Master", "#FF6B6B", "🔥"),
    ("Grandmaster", "#FFD700", "👑"),
]
CALIBRATING_TIER = ("Calibrating", "#9B59B6", "⚡")
RATING_PLACEHOLDER = "TBD"
