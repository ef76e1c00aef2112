#!/usr/bin/env python3
"""
CAN Wheel Cube Driver

Cube handle for a differential-drive base built from two CubeMars AK-series
actuators on a CAN bus, one per wheel.

The actuators speak the MIT Mini Cheetah protocol, which is an impedance
controller: every frame carries a target position, a target velocity, a
stiffness (kp), a damping (kd) and a feed-forward torque. Setting kp to 0
removes the position spring and leaves a pure velocity controller, which is
exactly what a wheel needs.

Hardware Requirements:
- CAN interface (e.g., Waveshare RS485 CAN HAT on Raspberry Pi)
- Proper 120Ω termination on CAN bus

Protocol Reference:
MIT Mini Cheetah protocol uses 8-byte CAN frames with:
- Position: 16-bit unsigned (-12.5 to 12.5 rad)
- Velocity: 12-bit unsigned (-45 to 45 rad/s)
- Kp: 12-bit unsigned (0 to 500)
- Kd: 12-bit unsigned (0 to 5)
- Torque: 12-bit unsigned (-18 to 18 Nm)
"""

import logging
import threading

import can

from .config_file import load_config_file
from .cube_driver import CubeDriver, CommandResult

logger = logging.getLogger(__name__)

# Duty range accepted by drive(); full scale maps to max_wheel_speed
DUTY_FULL_SCALE = 115

P_MIN, P_MAX = -12.5, 12.5
V_MIN, V_MAX = -45.0, 45.0
KP_MIN, KP_MAX = 0.0, 500.0
KD_MIN, KD_MAX = 0.0, 5.0
T_MIN, T_MAX = -18.0, 18.0

ENTER_MOTOR_MODE = [0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFC]
EXIT_MOTOR_MODE = [0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFD]


def float_to_uint(x, x_min, x_max, bits):
    """
    Map a float in [x_min, x_max] onto an unsigned int of the given width.

    Values outside the range are clamped first, so the result always fits
    in `bits` bits.
    """
    x = max(x_min, min(x_max, x))
    span = x_max - x_min
    return int((x - x_min) * ((1 << bits) - 1) / span)


def pack_velocity_frame(velocity, kd):
    """
    Pack a velocity-mode MIT frame (position 0, kp 0, torque 0).

    Byte layout:
        0-1: Position (16 bits)
        2-3: Velocity (12 bits) + Kp high nibble (4 bits)
        4-5: Kp low byte (8 bits) + Kd high byte (8 bits)
        6-7: Kd low nibble (4 bits) + Torque (12 bits)
    """
    p_int = float_to_uint(0.0, P_MIN, P_MAX, 16)
    v_int = float_to_uint(velocity, V_MIN, V_MAX, 12)
    kp_int = float_to_uint(0.0, KP_MIN, KP_MAX, 12)
    kd_int = float_to_uint(kd, KD_MIN, KD_MAX, 12)
    t_int = float_to_uint(0.0, T_MIN, T_MAX, 12)

    return bytes([
        p_int >> 8,
        p_int & 0xFF,
        (v_int >> 4) & 0xFF,
        ((v_int & 0xF) << 4) | ((kp_int >> 8) & 0xF),
        kp_int & 0xFF,
        (kd_int >> 4) & 0xFF,
        ((kd_int & 0xF) << 4) | ((t_int >> 8) & 0xF),
        t_int & 0xFF,
    ])


def duty_to_velocity(duty, max_wheel_speed):
    """Linear duty -> wheel velocity (rad/s), saturating at full scale."""
    duty = max(-DUTY_FULL_SCALE, min(DUTY_FULL_SCALE, duty))
    return duty / DUTY_FULL_SCALE * max_wheel_speed


class CubeMarsWheel:
    """
    One wheel motor on the shared bus, driven in velocity mode.

    The right motor of a differential base is usually mounted mirrored, so
    `inverted` flips the sign to make positive duty mean "forward" on both
    sides.
    """

    def __init__(self, bus, motor_id, kd=1.0, inverted=False):
        self.bus = bus
        self.motor_id = motor_id
        self.kd = max(KD_MIN, min(KD_MAX, kd))
        self.inverted = inverted

    def set_velocity(self, velocity):
        if self.inverted:
            velocity = -velocity
        self._send(pack_velocity_frame(velocity, self.kd))

    def enter_motor_mode(self):
        self._send(ENTER_MOTOR_MODE)

    def exit_motor_mode(self):
        self._send(EXIT_MOTOR_MODE)

    def _send(self, data):
        msg = can.Message(
            arbitration_id=self.motor_id,
            data=data,
            is_extended_id=False
        )
        self.bus.send(msg)


class CanWheelCube(CubeDriver):
    """
    Differential-drive cube made of two CubeMars wheel motors.

    drive() sets both wheel velocities immediately and arms a timer that
    zeroes them after duration_ms, so the call returns right away like any
    other cube handle. A new drive() cancels the pending stop.

    There is no speaker on this base: play_sound() always reports
    "unsupported", which makes the motion layer use its spin-pulse fallback.

    Example:
        cube = CanWheelCube.from_config(cube_index=0)
        cube.drive(80, 80, 700)     # forward for 0.7 s
        cube.disconnect()
    """

    def __init__(self, left_motor_id=1, right_motor_id=2, can_channel='can0',
                 name=None, max_wheel_speed=20.0, kd=1.0, right_inverted=True,
                 bus_interface='socketcan', bus=None):
        """
        Args:
            left_motor_id: CAN ID of the left wheel motor
            right_motor_id: CAN ID of the right wheel motor
            can_channel: CAN interface name (default: 'can0')
            name: Human-readable name for log lines
            max_wheel_speed: Wheel velocity (rad/s) at full duty (115)
            kd: Damping gain used for the velocity loop
            right_inverted: True when the right motor is mounted mirrored
            bus_interface: python-can interface type ('socketcan', 'virtual', ...)
            bus: Existing python-can bus to share (skips opening a new one)

        Note: The bitrate is configured at the OS level:
              sudo ip link set can0 type can bitrate 1000000
        """
        super().__init__(name or f"Cube-{left_motor_id}/{right_motor_id}")
        self.can_channel = can_channel
        self.max_wheel_speed = max_wheel_speed

        if bus is None:
            try:
                bus = can.interface.Bus(channel=can_channel, interface=bus_interface)
            except Exception as e:
                logger.error(f"[{self.name}] Error connecting to CAN: {e}")
                raise
        self.bus = bus
        logger.info(f"[{self.name}] Connected to {can_channel}")

        self.left = CubeMarsWheel(bus, left_motor_id, kd=kd)
        self.right = CubeMarsWheel(bus, right_motor_id, kd=kd, inverted=right_inverted)

        self._lock = threading.Lock()
        self._stop_timer = None
        self._connected = True

        self.left.enter_motor_mode()
        self.right.enter_motor_mode()

    @property
    def is_connected(self):
        return self._connected

    def drive(self, left, right, duration_ms):
        if not self._connected:
            return CommandResult.failure("not connected")

        with self._lock:
            self._cancel_stop_timer()
            try:
                self.left.set_velocity(duty_to_velocity(left, self.max_wheel_speed))
                self.right.set_velocity(duty_to_velocity(right, self.max_wheel_speed))
            except can.CanError as e:
                logger.warning(f"[{self.name}] Drive failed: {e}")
                return CommandResult.failure(str(e))

            if duration_ms > 0 and (left != 0 or right != 0):
                self._stop_timer = threading.Timer(duration_ms / 1000.0, self._halt)
                self._stop_timer.daemon = True
                self._stop_timer.start()

        return CommandResult.success()

    def play_sound(self, preset_id):
        if not self._connected:
            return CommandResult.failure("not connected")
        return CommandResult.failure("unsupported")

    def disconnect(self):
        """
        Clean shutdown of the cube.

        1. Cancels any pending timed stop and zeroes both wheels
        2. Exits motor mode (wheels go limp)
        3. Closes the CAN bus connection
        """
        if not self._connected:
            return
        with self._lock:
            self._cancel_stop_timer()
            try:
                self.left.set_velocity(0.0)
                self.right.set_velocity(0.0)
                self.left.exit_motor_mode()
                self.right.exit_motor_mode()
            except can.CanError as e:
                logger.warning(f"[{self.name}] Shutdown frames failed: {e}")
            self._connected = False
        self.bus.shutdown()
        logger.info(f"[{self.name}] Driver closed")

    @classmethod
    def from_config(cls, cube_index=0, config_path=None, bus_interface='socketcan'):
        """
        Create a cube from cube_config.json.

        Usage:
            cube = CanWheelCube.from_config(cube_index=1)

        Args:
            cube_index: Position of the cube in the config's "cubes" list
            config_path: Path to cube_config.json (optional, uses default if None)
            bus_interface: python-can interface type

        Returns:
            CanWheelCube: Configured cube instance
        """
        config = load_config_file(config_path)

        cubes = config.get('cubes', [])
        if not 0 <= cube_index < len(cubes):
            raise ValueError(f"Cube index {cube_index} not found in config")
        cube_config = cubes[cube_index]

        return cls(
            left_motor_id=cube_config['left_motor_id'],
            right_motor_id=cube_config['right_motor_id'],
            can_channel=config['can_interface']['channel'],
            name=cube_config.get('name'),
            max_wheel_speed=cube_config.get('max_wheel_speed', 20.0),
            kd=cube_config.get('kd', 1.0),
            right_inverted=cube_config.get('right_inverted', True),
            bus_interface=bus_interface
        )

    def _halt(self):
        with self._lock:
            self._stop_timer = None
            if not self._connected:
                return
            try:
                self.left.set_velocity(0.0)
                self.right.set_velocity(0.0)
            except can.CanError as e:
                logger.warning(f"[{self.name}] Timed stop failed: {e}")

    def _cancel_stop_timer(self):
        if self._stop_timer is not None:
            self._stop_timer.cancel()
            self._stop_timer = None
