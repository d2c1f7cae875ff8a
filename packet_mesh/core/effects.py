"""Visual effect scheduling for the packet network.

This module defines the short-lived effects the router emits (pulses,
processing flashes, blinks and ripples) and the EffectScheduler, which ages
them and forgets them once their lifetime is over. Drawing them is up to the
renderer; the scheduler only tracks liveness.
"""

from dataclasses import dataclass
from typing import ClassVar, Dict, Iterator, List, Optional

from packet_mesh.core.enums import EffectKind, PulseRole


@dataclass
class Effect:
    """Base class for visual effects.

    Attributes:
        node_id: Node the effect is drawn at.
        color: Display colour.
        elapsed: Seconds since the effect was queued.
    """

    kind: ClassVar[EffectKind]

    node_id: int
    color: str
    elapsed: float = 0.0


@dataclass
class Pulse(Effect):
    """Expanding ring around a node that sent, received or routed a packet."""

    kind: ClassVar[EffectKind] = EffectKind.PULSE

    role: PulseRole = PulseRole.ROUTE


@dataclass
class ProcessingFlash(Effect):
    """Short glow on a node that handled a packet."""

    kind: ClassVar[EffectKind] = EffectKind.PROCESSING_FLASH


@dataclass
class Blink(Effect):
    """Warning blink where a packet was dropped."""

    kind: ClassVar[EffectKind] = EffectKind.BLINK


@dataclass
class Ripple(Effect):
    """Ripple where a packet arrived, concentric when it was delivered."""

    kind: ClassVar[EffectKind] = EffectKind.RIPPLE

    final: bool = False


class EffectScheduler:
    """Per-kind queues of live effects.

    Attributes:
        durations: Lifetime in seconds of each effect kind.
        queues: Live effects of each kind, in insertion order.
    """

    def __init__(self, durations: Dict[EffectKind, float]) -> None:
        """Initialize the scheduler.

        Args:
            durations: Lifetime in seconds of each effect kind.
        """
        missing = [kind.name for kind in EffectKind if kind not in durations]
        if missing:
            raise ValueError(f"Missing effect durations: {', '.join(missing)}")
        self.durations = dict(durations)
        self.queues: Dict[EffectKind, List[Effect]] = {kind: [] for kind in EffectKind}

    @classmethod
    def from_config(cls, config) -> "EffectScheduler":
        return cls(
            {
                EffectKind.PULSE: config.pulse_duration,
                EffectKind.PROCESSING_FLASH: config.processing_flash_duration,
                EffectKind.BLINK: config.blink_duration,
                EffectKind.RIPPLE: config.ripple_duration,
            }
        )

    def add(self, effect: Effect) -> Effect:
        self.queues[effect.kind].append(effect)
        return effect

    def advance(self, dt: float) -> None:
        """Age every effect and drop the expired ones.

        Args:
            dt: Time step in seconds.
        """
        for kind, queue in self.queues.items():
            duration = self.durations[kind]
            for effect in queue:
                effect.elapsed += dt
            self.queues[kind] = [e for e in queue if e.elapsed < duration]

    def queue(self, kind: EffectKind) -> List[Effect]:
        return self.queues[kind]

    @property
    def pulses(self) -> List[Effect]:
        return self.queues[EffectKind.PULSE]

    @property
    def processing_flashes(self) -> List[Effect]:
        return self.queues[EffectKind.PROCESSING_FLASH]

    @property
    def blinks(self) -> List[Effect]:
        return self.queues[EffectKind.BLINK]

    @property
    def ripples(self) -> List[Effect]:
        return self.queues[EffectKind.RIPPLE]

    def at_node(self, node_id: int) -> List[Effect]:
        """Get every live effect drawn at a node.

        Args:
            node_id: Node ID to look up.

        Returns:
            The effects of all kinds at the node.
        """
        return [effect for effect in self if effect.node_id == node_id]

    def latest_pulse(self, node_id: int) -> Optional[Pulse]:
        """Get the most recently queued pulse at a node, if any."""
        for effect in reversed(self.pulses):
            if effect.node_id == node_id:
                return effect
        return None

    def remaining(self, effect: Effect) -> float:
        """Fraction of the effect's lifetime still ahead, in [0, 1]."""
        duration = self.durations[effect.kind]
        return max(0.0, 1.0 - effect.elapsed / duration)

    def clear(self) -> None:
        for queue in self.queues.values():
            queue.clear()

    def __iter__(self) -> Iterator[Effect]:
        for queue in self.queues.values():
            yield from queue

    def __len__(self) -> int:
        return sum(len(queue) for queue in self.queues.values())

    def __repr__(self) -> str:
        counts = ", ".join(f"{k.value}={len(q)}" for k, q in self.queues.items())
        return f"EffectScheduler({counts})"
