from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from geoar.config import OrientationConfig
from geoar.errors import PlatformError, StateError
from geoar.models import Object3D
from geoar.orientation.fuser import OrientationFuser, SmoothingMode
from geoar.orientation.rotation import camera_forward, device_quaternion
from geoar.platform.simulated import SimulatedOrientationProvider, SimulatedPermissionProvider


def _same_rotation(q1: np.ndarray, q2: np.ndarray) -> bool:
    return bool(np.isclose(abs(np.dot(q1, q2)), 1.0, atol=1e-12))


def _fuser(
    smoothing_factor: float = 1.0,
    **kwargs,
) -> tuple[OrientationFuser, Object3D, SimulatedOrientationProvider]:
    camera = Object3D(name="camera")
    provider = SimulatedOrientationProvider()
    fuser = OrientationFuser(
        camera, provider, OrientationConfig(smoothing_factor=smoothing_factor, **kwargs)
    )
    fuser.connect()
    return fuser, camera, provider


def test_smoothing_mode_follows_factor() -> None:
    assert _fuser(1.0)[0].mode is SmoothingMode.PASSTHROUGH
    assert _fuser(0.3)[0].mode is SmoothingMode.BLEND


def test_update_without_sample_is_noop() -> None:
    fuser, camera, _ = _fuser()
    assert not fuser.update()
    assert np.array_equal(camera.quaternion, [0.0, 0.0, 0.0, 1.0])


def test_empty_sample_is_ignored() -> None:
    fuser, camera, provider = _fuser()
    provider.push_sample(None, None, None)
    assert not fuser.update()
    assert np.array_equal(camera.quaternion, [0.0, 0.0, 0.0, 1.0])


def test_passthrough_has_no_memory_of_previous_samples() -> None:
    fuser, camera, provider = _fuser(1.0)
    provider.push_sample(200.0, 30.0, -40.0)
    fuser.update()
    provider.push_sample(90.0, 0.0, 0.0)
    fuser.update()

    expected = device_quaternion(math.pi / 2.0, 0.0, 0.0, 0.0)
    assert _same_rotation(camera.quaternion, expected)
    assert fuser.smoothed is None


def test_flat_device_looks_down() -> None:
    fuser, camera, provider = _fuser()
    provider.push_sample(0.0, 0.0, 0.0)
    fuser.update()
    assert np.allclose(camera_forward(camera.quaternion), [0.0, -1.0, 0.0], atol=1e-12)


def test_upright_device_looks_north_then_west() -> None:
    fuser, camera, provider = _fuser()
    provider.push_sample(0.0, 90.0, 0.0)
    fuser.update()
    assert np.allclose(camera_forward(camera.quaternion), [0.0, 0.0, -1.0], atol=1e-12)

    provider.push_sample(90.0, 90.0, 0.0)
    fuser.update()
    assert np.allclose(camera_forward(camera.quaternion), [-1.0, 0.0, 0.0], atol=1e-12)


def test_alpha_offset_is_added_to_heading() -> None:
    fuser, camera, provider = _fuser(alpha_offset=math.pi / 2.0)
    provider.push_sample(0.0, 0.0, 0.0)
    fuser.update()
    assert _same_rotation(camera.quaternion, device_quaternion(math.pi / 2.0, 0.0, 0.0, 0.0))


def test_screen_orientation_is_compensated() -> None:
    fuser, camera, provider = _fuser()
    provider.rotate_screen(90.0)
    provider.push_sample(10.0, 45.0, 5.0)
    fuser.update()

    expected = device_quaternion(math.radians(10.0), math.radians(45.0), math.radians(5.0), math.pi / 2.0)
    assert fuser.screen_orientation == 90.0
    assert _same_rotation(camera.quaternion, expected)


def test_connect_reads_screen_orientation_once() -> None:
    provider = SimulatedOrientationProvider(screen_angle=-90.0)
    fuser = OrientationFuser(Object3D(), provider)
    fuser.connect()
    assert fuser.screen_orientation == -90.0


def test_blend_moves_part_way_toward_new_heading() -> None:
    fuser, camera, provider = _fuser(0.5)
    provider.push_sample(0.0, 0.0, 0.0)
    fuser.update()
    provider.push_sample(90.0, 0.0, 0.0)
    fuser.update()

    assert np.isclose(fuser.smoothed.alpha, math.pi / 4.0)
    assert _same_rotation(camera.quaternion, device_quaternion(math.pi / 4.0, 0.0, 0.0, 0.0))


def test_blend_takes_short_way_round_north() -> None:
    fuser, camera, provider = _fuser(0.5)
    provider.push_sample(350.0, 90.0, 0.0)
    fuser.update()
    provider.push_sample(10.0, 90.0, 0.0)
    fuser.update()

    alpha = fuser.smoothed.alpha % (2.0 * math.pi)
    assert min(alpha, 2.0 * math.pi - alpha) < 1e-9
    assert np.allclose(camera_forward(camera.quaternion), [0.0, 0.0, -1.0], atol=1e-9)


def test_first_blended_tick_uses_raw_sample() -> None:
    fuser, camera, provider = _fuser(0.2)
    provider.push_sample(30.0, 20.0, -10.0)
    fuser.update()
    expected = device_quaternion(math.radians(30.0), math.radians(20.0), math.radians(-10.0), 0.0)
    assert _same_rotation(camera.quaternion, expected)
    assert np.isclose(fuser.smoothed.beta, math.radians(20.0) + math.pi)
    assert np.isclose(fuser.smoothed.gamma, math.radians(-10.0) + math.pi / 2.0)


def test_only_latest_sample_is_used() -> None:
    fuser, camera, provider = _fuser()
    provider.push_sample(10.0, 10.0, 10.0)
    provider.push_sample(20.0, 20.0, 20.0)
    provider.push_sample(45.0, 60.0, 0.0)
    fuser.update()
    expected = device_quaternion(math.radians(45.0), math.radians(60.0), 0.0, 0.0)
    assert _same_rotation(camera.quaternion, expected)


def test_change_listeners_fire_only_on_real_change() -> None:
    fuser, _, provider = _fuser()
    changes: list[np.ndarray] = []
    fuser.add_change_listener(changes.append)

    provider.push_sample(30.0, 60.0, 0.0)
    assert fuser.update()
    assert not fuser.update()
    provider.push_sample(30.0, 60.0, 0.0)
    assert not fuser.update()
    provider.push_sample(31.0, 60.0, 0.0)
    assert fuser.update()
    assert len(changes) == 2

    fuser.remove_change_listener(changes.append)
    provider.push_sample(50.0, 60.0, 0.0)
    fuser.update()
    assert len(changes) == 2


def test_disconnect_stops_updates_and_is_idempotent() -> None:
    fuser, camera, provider = _fuser()
    provider.push_sample(30.0, 60.0, 0.0)
    fuser.update()
    snapshot = camera.quaternion.copy()

    fuser.disconnect()
    fuser.disconnect()
    assert provider.listener_count == 0
    assert not fuser.connected
    provider.push_sample(120.0, 10.0, 0.0)
    assert not fuser.update()
    assert np.array_equal(camera.quaternion, snapshot)


def test_reconnect_after_disconnect() -> None:
    fuser, camera, provider = _fuser()
    fuser.disconnect()
    assert fuser.connect()
    provider.push_sample(30.0, 60.0, 0.0)
    assert fuser.update()
    assert not np.array_equal(camera.quaternion, [0.0, 0.0, 0.0, 1.0])


def test_dispose_releases_state() -> None:
    fuser, _, provider = _fuser(0.5)
    provider.push_sample(30.0, 60.0, 0.0)
    fuser.update()
    fuser.dispose()
    fuser.dispose()
    assert fuser.latest_sample is None
    assert fuser.smoothed is None
    assert provider.listener_count == 0
    with pytest.raises(StateError):
        fuser.connect()


def test_permission_granted_subscribes() -> None:
    provider = SimulatedOrientationProvider()
    permissions = SimulatedPermissionProvider()
    fuser = OrientationFuser(Object3D(), provider, permissions=permissions)
    assert fuser.connect()
    assert permissions.requests == 1
    assert fuser.connected


def test_permission_denied_leaves_camera_untouched() -> None:
    camera = Object3D()
    provider = SimulatedOrientationProvider()
    fuser = OrientationFuser(
        camera, provider, permissions=SimulatedPermissionProvider(response="denied")
    )
    errors: list[PlatformError] = []
    fuser.on_error(errors.append)

    assert not fuser.connect()
    provider.push_sample(30.0, 60.0, 0.0)
    fuser.update()

    assert not fuser.connected
    assert len(errors) == 1
    assert np.array_equal(camera.quaternion, [0.0, 0.0, 0.0, 1.0])


def test_permission_request_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    permissions = SimulatedPermissionProvider(error=PlatformError("not allowed in this context"))
    fuser = OrientationFuser(Object3D(), SimulatedOrientationProvider(), permissions=permissions)
    with caplog.at_level(logging.ERROR, logger="geoar"):
        assert not fuser.connect()
    assert "not allowed in this context" in caplog.text


def test_permission_not_required_is_skipped() -> None:
    permissions = SimulatedPermissionProvider(requires_permission=False, response="denied")
    fuser = OrientationFuser(Object3D(), SimulatedOrientationProvider(), permissions=permissions)
    assert fuser.connect()
    assert permissions.requests == 0


def test_absolute_samples_preferred_when_available() -> None:
    fuser, _, provider = _fuser()
    provider.push_sample(1.0, 2.0, 3.0)
    assert fuser.latest_sample.absolute

    relative_provider = SimulatedOrientationProvider(supports_absolute=False)
    relative = OrientationFuser(Object3D(), relative_provider)
    relative.connect()
    relative_provider.push_sample(1.0, 2.0, 3.0)
    assert not relative.latest_sample.absolute


def test_switching_to_passthrough_drops_smoothed_state() -> None:
    fuser, _, provider = _fuser(0.5)
    provider.push_sample(30.0, 60.0, 0.0)
    fuser.update()
    fuser.smoothing_factor = 1.0
    assert fuser.mode is SmoothingMode.PASSTHROUGH
    assert fuser.smoothed is None


def test_invalid_smoothing_factor() -> None:
    with pytest.raises(ValueError):
        OrientationConfig(smoothing_factor=0.0)


def test_listener_may_disconnect_during_notification() -> None:
    fuser, camera, provider = _fuser()
    seen: list[np.ndarray] = []

    def stop_after_first(quaternion: np.ndarray) -> None:
        seen.append(quaternion)
        fuser.disconnect()

    fuser.add_change_listener(stop_after_first)
    provider.push_sample(30.0, 60.0, 0.0)
    assert fuser.update()
    snapshot = camera.quaternion.copy()

    assert not fuser.connected
    assert provider.listener_count == 0
    provider.push_sample(120.0, 10.0, 0.0)
    assert not fuser.update()
    assert len(seen) == 1
    assert np.array_equal(camera.quaternion, snapshot)


def test_reset_smoothing_starts_from_next_raw_sample() -> None:
    fuser, camera, provider = _fuser(0.5)
    provider.push_sample(30.0, 60.0, 0.0)
    fuser.update()
    assert fuser.smoothed is not None

    fuser.reset_smoothing()
    assert fuser.smoothed is None
    provider.push_sample(90.0, 60.0, 0.0)
    fuser.update()

    expected = device_quaternion(math.radians(90.0), math.radians(60.0), 0.0, 0.0)
    assert _same_rotation(camera.quaternion, expected)
    assert fuser.smoothed is not None
