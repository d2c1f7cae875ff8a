"""Tests for the effect scheduler."""

import pytest

from packet_mesh.config import NetworkConfig
from packet_mesh.core.effects import Blink, EffectScheduler, ProcessingFlash, Pulse, Ripple
from packet_mesh.core.enums import EffectKind, PulseRole


@pytest.fixture
def scheduler() -> EffectScheduler:
    return EffectScheduler(
        {
            EffectKind.PULSE: 0.5,
            EffectKind.PROCESSING_FLASH: 0.3,
            EffectKind.BLINK: 0.5,
            EffectKind.RIPPLE: 0.7,
        }
    )


def test_effects_expire_per_kind(scheduler):
    scheduler.add(Pulse(1, "green", role=PulseRole.SEND))
    scheduler.add(ProcessingFlash(1, "yellow"))
    scheduler.add(Blink(2, "red"))
    scheduler.add(Ripple(3, "blue"))

    scheduler.advance(0.3)
    assert scheduler.processing_flashes == []
    assert len(scheduler) == 3

    scheduler.advance(0.2)
    assert scheduler.pulses == []
    assert scheduler.blinks == []
    assert len(scheduler.ripples) == 1

    scheduler.advance(0.3)
    assert len(scheduler) == 0


def test_no_live_effect_reaches_its_duration(scheduler):
    for step in range(20):
        scheduler.add(Pulse(step % 3, "green"))
        scheduler.add(Ripple(step % 3, "blue"))
        scheduler.advance(0.07)
        for effect in scheduler:
            assert effect.elapsed < scheduler.durations[effect.kind]


def test_effects_share_nodes_and_keep_order(scheduler):
    first = scheduler.add(Pulse(4, "green", role=PulseRole.SEND))
    scheduler.add(Blink(4, "red"))
    second = scheduler.add(Pulse(4, "orange", role=PulseRole.ROUTE))

    assert scheduler.pulses == [first, second]
    assert len(scheduler.at_node(4)) == 3
    assert scheduler.latest_pulse(4) is second
    assert scheduler.latest_pulse(5) is None


def test_remaining_fraction(scheduler):
    ripple = scheduler.add(Ripple(0, "blue"))
    scheduler.advance(0.35)
    assert scheduler.remaining(ripple) == pytest.approx(0.5)


def test_clear(scheduler):
    blink = scheduler.add(Blink(0, "red"))
    assert scheduler.queue(EffectKind.BLINK) == [blink]
    scheduler.clear()
    assert len(scheduler) == 0


def test_missing_durations_rejected():
    with pytest.raises(ValueError):
        EffectScheduler({EffectKind.PULSE: 0.5})


def test_from_config_uses_configured_durations():
    config = NetworkConfig(node_count=0, blink_duration=1.5)
    scheduler = EffectScheduler.from_config(config)
    assert scheduler.durations[EffectKind.BLINK] == 1.5
    assert scheduler.durations[EffectKind.RIPPLE] == config.ripple_duration
