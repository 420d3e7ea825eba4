"""Lotto 6/45 domain constants."""

MIN_NUMBER = 1
MAX_NUMBER = 45
TOTAL_NUMBERS = MAX_NUMBER - MIN_NUMBER + 1
NUMBERS_PER_DRAW = 6
ALL_NUMBERS = range(MIN_NUMBER, MAX_NUMBER + 1)

# 1-22 low, 23-45 high
HIGH_LOW_BOUNDARY = 23

# Official ball colours: Yellow, Blue, Red, Gray, grEen
COLOR_BANDS = (
    ("Y", 1, 10),
    ("B", 11, 20),
    ("R", 21, 30),
    ("G", 31, 40),
    ("E", 41, 45),
)

GRID_SIZE = 7

# Beta(1, 1) prior for the per-number posterior
BETA_ALPHA = 1.0
BETA_BETA = 1.0
UNIFORM_PRIOR = 1.0 / TOTAL_NUMBERS

MAX_METHOD_CODES = 3
MAX_RECOMMEND_COUNT = 10
