"""Tests for the AHRS algorithm."""

import math

import pytest
from numpy.testing import assert_allclose

from imu_fusion.core.types import Quaternion, Vector3
from imu_fusion.fusion.ahrs import Ahrs, _rejection_threshold
from imu_fusion.fusion.settings import AhrsSettings, Convention

DT = 0.01
STILL = Vector3(0.0, 0.0, 0.0)


def _run(ahrs, count, gyr=STILL, acc=Vector3(0.0, 0.0, 1.0), mag=Vector3(1.0, 0.0, 0.0)):
    for _ in range(count):
        ahrs.update(gyr, acc, mag, DT)


class TestInitialisation:
    """Tests for start-up behaviour and gain ramping."""

    def test_initial_state(self, settings):
        """New algorithm should be at identity and initialising."""
        ahrs = Ahrs(settings)

        assert ahrs.quaternion == Quaternion.identity()
        assert ahrs.initialising
        assert ahrs.flags().initialising
        assert not ahrs.flags().angular_rate_recovery

    def test_default_settings(self):
        """Algorithm can be created without settings."""
        ahrs = Ahrs()
        assert ahrs.settings == AhrsSettings()

    def test_level_north_stays_at_identity(self, settings, level_acc, north_mag):
        """Level stationary sensor facing north should report zero angles."""
        ahrs = Ahrs(settings)
        _run(ahrs, 500, acc=level_acc, mag=north_mag)

        euler = ahrs.euler()
        assert abs(euler.roll) < 0.5
        assert abs(euler.pitch) < 0.5
        assert abs(euler.yaw) < 0.5
        assert not ahrs.initialising

    def test_initialisation_lasts_three_seconds(self, settings, level_acc, north_mag):
        """Gain ramp should finish shortly after three seconds."""
        ahrs = Ahrs(settings)

        _run(ahrs, 290, acc=level_acc, mag=north_mag)
        assert ahrs.initialising

        _run(ahrs, 20, acc=level_acc, mag=north_mag)
        assert not ahrs.initialising

    def test_zero_gain_skips_initialisation(self):
        """With zero gain the first update ends initialisation and ignores feedback."""
        ahrs = Ahrs(AhrsSettings(gain=0.0))
        ahrs.update(STILL, Vector3(0.0, 0.5, 0.866), STILL, DT)

        assert not ahrs.initialising
        assert ahrs.quaternion == Quaternion.identity()

    def test_converges_to_tilt(self, settings):
        """Tilted accelerometer should drive roll to the tilt angle."""
        ahrs = Ahrs(settings)
        acc = Vector3(0.0, 0.5, math.sqrt(3.0) / 2.0)

        for _ in range(500):
            ahrs.update_no_mag(STILL, acc, DT)

        euler = ahrs.euler()
        assert abs(euler.roll - 30.0) < 0.5
        assert abs(euler.pitch) < 0.5
        assert abs(euler.yaw) < 0.5

    def test_quaternion_stays_normalised(self, settings, level_acc, north_mag):
        """Quaternion norm should stay at one while rotating."""
        ahrs = Ahrs(settings)
        _run(ahrs, 300, gyr=Vector3(20.0, -35.0, 50.0), acc=level_acc, mag=north_mag)

        assert abs(ahrs.quaternion.norm - 1.0) < 1e-9


class TestUpdateVariants:
    """Tests for the magnetometer-free and external heading updates."""

    def test_no_mag_holds_heading_while_initialising(self, settings, level_acc):
        """Heading should be held at zero during initialisation."""
        ahrs = Ahrs(settings)

        for _ in range(100):
            ahrs.update_no_mag(Vector3(0.0, 0.0, 10.0), level_acc, DT)
            assert ahrs.initialising
            assert abs(ahrs.euler().yaw) < 1e-3

    def test_no_mag_integrates_heading_after_initialisation(self, settings, level_acc):
        """After initialisation the gyroscope alone drives heading."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=STILL)

        for _ in range(100):
            ahrs.update_no_mag(Vector3(0.0, 0.0, 10.0), level_acc, DT)

        assert abs(ahrs.euler().yaw - 10.0) < 0.01

    def test_external_heading(self, settings, level_acc):
        """External heading should be tracked as yaw."""
        ahrs = Ahrs(settings)

        for _ in range(500):
            ahrs.update_external_heading(STILL, level_acc, 30.0, DT)

        assert abs(ahrs.euler().yaw - 30.0) < 0.5
        assert abs(ahrs.euler().roll) < 0.5

    def test_magnetometer_heading(self, settings, level_acc):
        """A field rotated by 30 degrees in the sensor frame gives 30 degrees yaw."""
        ahrs = Ahrs(settings)
        mag = Vector3(math.cos(math.radians(30.0)), -math.sin(math.radians(30.0)), 0.0)

        _run(ahrs, 500, acc=level_acc, mag=mag)

        assert abs(ahrs.euler().yaw - 30.0) < 0.5

    @pytest.mark.parametrize("heading", [0.0, 90.0, -45.0])
    def test_set_heading(self, heading):
        """set_heading should rotate yaw to the requested value."""
        ahrs = Ahrs()
        ahrs.set_heading(heading)

        assert abs(ahrs.euler().yaw - heading) < 1e-6

    def test_zero_sensors_are_skipped(self, settings):
        """Zero accelerometer and magnetometer readings leave only the gyroscope."""
        ahrs = Ahrs(settings)

        for _ in range(100):
            ahrs.update(Vector3(0.0, 0.0, 20.0), STILL, STILL, DT)

        states = ahrs.internal_states()
        assert states.accelerometer_ignored
        assert states.magnetometer_ignored
        assert abs(ahrs.euler().yaw - 20.0) < 0.01

    def test_upside_down_accelerometer(self, settings, north_mag):
        """Accelerometer opposite to the estimated gravity gives no feedback."""
        ahrs = Ahrs(settings)

        ahrs.update(STILL, Vector3(0.0, 0.0, -1.0), north_mag, DT)

        assert ahrs.quaternion.is_valid()
        assert ahrs.internal_states().acceleration_error == 0.0
        assert not ahrs.internal_states().accelerometer_ignored

    def test_magnetometer_parallel_to_gravity(self, settings, level_acc):
        """A vertical field has no horizontal component and gives no feedback."""
        ahrs = Ahrs(settings)

        for _ in range(10):
            ahrs.update(STILL, level_acc, Vector3(0.0, 0.0, 0.5), DT)

        assert ahrs.quaternion == Quaternion.identity()
        assert ahrs.internal_states().magnetic_error == 0.0

    def test_accepts_sequences(self, settings):
        """Plain sequences and numpy arrays are accepted as vectors."""
        ahrs = Ahrs(settings)
        ahrs.update([0.0, 0.0, 0.0], (0.0, 0.0, 1.0), [1.0, 0.0, 0.0], DT)

        assert ahrs.quaternion == Quaternion.identity()


class TestRejectionAndRecovery:
    """Tests for accelerometer rejection and the recovery trigger."""

    def test_rejection_threshold(self):
        """Threshold is the squared half sine of the angle, zero means disabled."""
        assert _rejection_threshold(0.0) == math.inf
        assert abs(_rejection_threshold(10.0) - (0.5 * math.sin(math.radians(10.0))) ** 2) < 1e-15

    def test_acceleration_rejected_then_recovered(self, settings, level_acc):
        """Sustained disagreement is ignored until the recovery trigger fires."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=STILL)
        assert not ahrs.initialising
        level = ahrs.quaternion

        sideways = Vector3(1.0, 0.0, 0.0)
        for k in range(1, 501):
            ahrs.update(STILL, sideways, STILL, DT)
            assert ahrs.internal_states().accelerometer_ignored
            if k == 250:
                assert abs(ahrs.internal_states().acceleration_recovery_trigger - 0.5) < 1e-12

        assert ahrs.quaternion == level
        assert not ahrs.flags().acceleration_recovery
        assert ahrs.internal_states().acceleration_recovery_trigger == 1.0

        for _ in range(100):
            ahrs.update(STILL, sideways, STILL, DT)

        assert ahrs.flags().acceleration_recovery
        assert not ahrs.internal_states().accelerometer_ignored
        assert ahrs.quaternion != level

    def test_magnetometer_rejected_then_recovered(self, settings, level_acc, north_mag):
        """Magnetometer has its own trigger and recovers without touching the accelerometer."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=north_mag)
        assert not ahrs.initialising
        level = ahrs.quaternion

        rotated = Vector3(math.cos(math.radians(45.0)), -math.sin(math.radians(45.0)), 0.0)
        for k in range(1, 501):
            ahrs.update(STILL, level_acc, rotated, DT)
            states = ahrs.internal_states()
            assert states.magnetometer_ignored
            assert abs(states.magnetic_recovery_trigger - k / 500) < 1e-12
            assert states.acceleration_recovery_trigger == 0.0
            assert not states.accelerometer_ignored

        assert ahrs.quaternion == level
        assert not ahrs.flags().magnetic_recovery

        for _ in range(100):
            ahrs.update(STILL, level_acc, rotated, DT)
            states = ahrs.internal_states()
            assert states.magnetic_recovery_trigger <= 1.0
            assert states.acceleration_recovery_trigger == 0.0

        flags = ahrs.flags()
        assert flags.magnetic_recovery
        assert not flags.acceleration_recovery
        assert not ahrs.internal_states().magnetometer_ignored
        assert 0.0 < ahrs.euler().yaw < 45.0

    def test_error_reported_in_degrees(self, settings, level_acc):
        """Acceleration error should be the angle between measurement and estimate."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=STILL)

        tilt = math.radians(20.0)
        ahrs.update(STILL, Vector3(0.0, math.sin(tilt), math.cos(tilt)), STILL, DT)

        states = ahrs.internal_states()
        assert abs(states.acceleration_error - 20.0) < 1e-6
        assert states.accelerometer_ignored

    def test_zero_period_disables_rejection(self, level_acc):
        """Without a recovery period disagreeing samples are always used."""
        ahrs = Ahrs(AhrsSettings(acceleration_rejection=10.0, recovery_trigger_period=0))
        _run(ahrs, 400, acc=level_acc, mag=STILL)

        ahrs.update(STILL, Vector3(1.0, 0.0, 0.0), STILL, DT)

        assert not ahrs.internal_states().accelerometer_ignored
        assert not ahrs.flags().acceleration_recovery
        assert ahrs.internal_states().acceleration_recovery_trigger == 0.0


class TestGyroscopeRange:
    """Tests for gyroscope overflow handling."""

    def test_overflow_reinitialises(self, settings, level_acc, north_mag):
        """Exceeding the range restarts initialisation until it completes again."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=north_mag)
        assert not ahrs.initialising

        ahrs.update(Vector3(1970.0, 0.0, 0.0), level_acc, north_mag, DT)

        flags = ahrs.flags()
        assert flags.angular_rate_recovery
        assert flags.initialising

        _run(ahrs, 350, acc=level_acc, mag=north_mag)

        flags = ahrs.flags()
        assert not flags.angular_rate_recovery
        assert not flags.initialising
        assert abs(ahrs.euler().roll) < 0.5

    def test_within_margin_is_not_overflow(self, settings, level_acc, north_mag):
        """Rates below 98 percent of the range are normal."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=north_mag)

        ahrs.update(Vector3(0.0, -1950.0, 0.0), level_acc, north_mag, DT)

        assert not ahrs.flags().angular_rate_recovery
        assert not ahrs.initialising

    def test_unbounded_range(self, level_acc):
        """Zero range never overflows."""
        ahrs = Ahrs(AhrsSettings(gyroscope_range=0.0))
        _run(ahrs, 400, acc=level_acc, mag=STILL)

        ahrs.update(Vector3(1e6, 0.0, 0.0), level_acc, STILL, DT)

        assert not ahrs.flags().angular_rate_recovery


class TestStateAccess:
    """Tests for settings changes, reset and derived outputs."""

    def test_update_settings_snaps_gain_after_initialisation(self, settings, level_acc):
        """A new gain takes effect immediately once initialised."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, acc=level_acc, mag=STILL)

        ahrs.update_settings(AhrsSettings(gain=1.5, recovery_trigger_period=500))

        assert ahrs._ramped_gain == 1.5
        assert ahrs.settings.gain == 1.5

    def test_update_settings_keeps_ramp_while_initialising(self, settings):
        """During initialisation the ramp continues from its current value."""
        ahrs = Ahrs(settings)
        ahrs.update_settings(AhrsSettings(gain=1.0))

        assert ahrs._ramped_gain == 10.0
        assert ahrs.initialising

    def test_reset(self, settings, level_acc):
        """Reset should restore the initial state."""
        ahrs = Ahrs(settings)
        _run(ahrs, 400, gyr=Vector3(5.0, 0.0, 0.0), acc=level_acc, mag=STILL)

        ahrs.reset()

        assert ahrs.quaternion == Quaternion.identity()
        assert ahrs.initialising
        flags = ahrs.flags()
        assert not flags.angular_rate_recovery
        assert not flags.acceleration_recovery
        assert not flags.magnetic_recovery
        assert ahrs.internal_states().acceleration_error == 0.0

    def test_quaternion_setter(self, sample_quaternion):
        """Quaternion can be set from a Quaternion or an array."""
        ahrs = Ahrs()
        ahrs.quaternion = sample_quaternion
        assert ahrs.quaternion == sample_quaternion

        ahrs.quaternion = [0.0, 1.0, 0.0, 0.0]
        assert ahrs.quaternion == Quaternion(0.0, 1.0, 0.0, 0.0)

    def test_level_accelerations(self, settings, level_acc, north_mag):
        """Level stationary sensor should have no earth or linear acceleration."""
        ahrs = Ahrs(settings)
        _run(ahrs, 100, acc=level_acc, mag=north_mag)

        assert_allclose(ahrs.earth_acceleration().to_array(), [0.0, 0.0, 0.0], atol=1e-9)
        assert_allclose(ahrs.linear_acceleration().to_array(), [0.0, 0.0, 0.0], atol=1e-9)

    def test_linear_acceleration_in_sensor_frame(self):
        """Gravity is removed along the estimated sensor-frame direction."""
        ahrs = Ahrs()
        half = math.radians(90.0) / 2.0
        ahrs.quaternion = Quaternion(math.cos(half), math.sin(half), 0.0, 0.0)
        ahrs.update(STILL, Vector3(0.0, 1.2, 0.0), STILL, 0.0)

        assert_allclose(ahrs.linear_acceleration().to_array(), [0.0, 0.2, 0.0], atol=1e-9)
        assert_allclose(ahrs.earth_acceleration().to_array(), [0.0, 0.0, 0.2], atol=1e-9)

    def test_internal_states_to_dict(self, settings, level_acc, north_mag):
        """Internal states should serialise to a flat dictionary."""
        ahrs = Ahrs(settings)
        _run(ahrs, 10, acc=level_acc, mag=north_mag)

        states = ahrs.internal_states().to_dict()
        assert set(states) == {
            'acceleration_error', 'accelerometer_ignored', 'acceleration_recovery_trigger',
            'magnetic_error', 'magnetometer_ignored', 'magnetic_recovery_trigger',
        }
        assert states['acceleration_error'] < 1e-6
        assert not states['accelerometer_ignored']

    def test_settings_convention_parsed(self):
        """Convention names are accepted in settings."""
        assert AhrsSettings(convention="ned").convention is Convention.NED
