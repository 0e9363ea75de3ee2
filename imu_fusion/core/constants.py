"""Filter constants shared by the AHRS and gyroscope offset algorithms."""

# Gain applied at the start of initialisation, ramped down to the target gain.
INITIAL_GAIN = 10.0

# Initialisation period in seconds.
INITIALISATION_PERIOD = 3.0

# Gyroscope offset estimator: stationary threshold in degrees per second.
GYROSCOPE_STATIONARY_THRESHOLD = 3.0

# Gyroscope offset estimator: low-pass cutoff frequency in Hz.
GYROSCOPE_OFFSET_CUTOFF_FREQUENCY = 0.02

# Gyroscope offset estimator: stationary time before the offset adapts, in seconds.
GYROSCOPE_OFFSET_TIMEOUT = 5

# Fraction of the gyroscope range above which the filter reinitialises.
GYROSCOPE_RANGE_MARGIN = 0.98

# Recovery trigger: decrement applied on an accepted sample.
RECOVERY_TRIGGER_DECREMENT = 9

# Recovery trigger: increment applied on a rejected sample.
RECOVERY_TRIGGER_INCREMENT = 1
