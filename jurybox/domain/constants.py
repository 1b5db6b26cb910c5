"""Default values shared across the consensus, quota and evaluation domains."""

from decimal import Decimal

# Score scale used by every judge
MIN_SCORE = 0.0
MAX_SCORE = 10.0

# Consensus
DEFAULT_CONSENSUS_METHOD = "simple_average"
DEFAULT_TRIM_PERCENT = 0.10
DEFAULT_OUTLIER_Z_THRESHOLD = 2.0
DEFAULT_MAJORITY_THRESHOLD = 5.0
CONFIDENCE_DECAY = 10.0  # variance at which confidence reaches zero

# Evaluation rounds
DEFAULT_MAX_DISCUSSION_ROUNDS = 3
MIN_DISCUSSION_ROUNDS = 1
MAX_DISCUSSION_ROUNDS = 10
DEFAULT_ROUND_TIMEOUT_MS = 60000
MIN_ROUND_TIMEOUT_MS = 10000
MAX_ROUND_TIMEOUT_MS = 300000
DEFAULT_CONVERGENCE_THRESHOLD = 0.5
DEFAULT_CRITERIA = ["Accuracy", "Clarity", "Completeness", "Relevance"]

# Quota
DEFAULT_MONTHLY_CAP = Decimal("100.0")
DEFAULT_CURRENCY = "USD"
DEFAULT_USAGE_HISTORY_LIMIT = 50
