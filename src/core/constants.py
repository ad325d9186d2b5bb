NEW_POSITION = "new_position"
REWARDS_BASED = "rewards_based"
VALUE_CHANGE = "value_change"

CONFIDENCE_VERY_LOW = "very_low"
CONFIDENCE_LOW = "low"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_HIGH = "high"

# ordered from least to most reliable
CONFIDENCE_LEVELS = [
    CONFIDENCE_VERY_LOW,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    CONFIDENCE_HIGH,
]

IDENTITY_EXTERNAL = "external"
IDENTITY_HEURISTIC = "heuristic"

DAYS_PER_YEAR = 365
NEW_POSITION_ASSUMED_DAYS = 1
MIN_ELAPSED_DAYS = 0.1

# value moved less than this fraction of current value => treat as flat
FLAT_VALUE_THRESHOLD = 0.01
REWARDS_MIN_ASSUMED_DAYS = 7
REWARDS_MAX_ASSUMED_DAYS = 30
# one assumed day per 0.1% of position value held as unclaimed rewards
REWARDS_DAILY_RATIO_UNIT = 0.001
REWARDS_APY_CAP = 200

NEW_POSITION_LOW_APY = 100
NEW_POSITION_VERY_LOW_APY = 1000
EXISTING_MEDIUM_APY = 100
EXISTING_LOW_APY = 1000
EXISTING_VERY_LOW_APY = 10000
SHORT_WINDOW_DAYS = 7
LONG_WINDOW_DAYS = 30
LARGE_PERIOD_LOSS_PCT = -50

# NAV
PERFORMANCE_HIGH_PCT = 100
PERFORMANCE_LOW_PCT = -90

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
