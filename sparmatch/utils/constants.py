"""
Constants used across the partner search and messaging services.
"""

# Geo-filter (planar approximation)
MILES_PER_DEGREE = 69.1  # Miles per degree of latitude
DEGREES_PER_RADIAN = 57.3
DEFAULT_SEARCH_RADIUS_MILES = 25.0

# Ratings
MIN_RATING = 0.0
MAX_RATING = 5.0
MIN_RATING_SCORE = 1
MAX_RATING_SCORE = 5

# Messaging
MAX_MESSAGE_LENGTH = 2000
