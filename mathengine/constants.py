import decimal

FORMAT = "[%(levelname)s - %(funcName)4s() ] %(message)s"

PRECISION = 100
ROUNDING_DIGITS = 5
ROUNDING = decimal.ROUND_HALF_UP

MAXIMUM_DIGITS = 1_000_000
MAXIMUM_DIGITS_WARNING = 700_000
