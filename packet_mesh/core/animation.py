"""Frame loop for the packet network.

This module defines the AnimationLoop class, which plays the part of a
browser's animation frame callback on a SimPy clock: it throttles frames to a
target rate, derives a capped time delta from successive timestamps, decides
whether to emit a packet and ticks the network.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import simpy

from packet_mesh.core.network import Network
from packet_mesh.utils.rng import MeshRNG

logger = logging.getLogger(__name__)


class AnimationLoop:
    """Drives a Network from a SimPy environment.

    Attributes:
        env: SimPy environment.
        network: The network being animated.
        target_tps: Frames per second.
        emit_chance: Probability of emitting a packet each frame.
        max_dt: Cap on the time delta of a single frame.
        frames: Number of frames processed so far.
        stalls: Number of stalls currently freezing the frame clock.
        frame_callbacks: Functions called with (network, now) after each frame.
    """

    def __init__(
        self,
        env: simpy.Environment,
        network: Network,
        target_tps: float = 50.0,
        emit_chance: Optional[float] = None,
        max_dt: Optional[float] = None,
        seed: Optional[int] = None,
    ):
        """Initialize the loop.

        Args:
            env: SimPy environment.
            network: The network to animate.
            target_tps: Frames per second.
            emit_chance: Emission probability per frame, defaults to the
                network's ``packet_emit_chance``.
            max_dt: Time delta cap, defaults to the network's ``max_dt``.
            seed: Seed for the emission decisions.
        """
        if target_tps <= 0:
            raise ValueError("target_tps must be positive")
        self.env = env
        self.network = network
        self.target_tps = target_tps
        self.frame_time = 1.0 / target_tps
        self.emit_chance = (
            network.config.packet_emit_chance if emit_chance is None else emit_chance
        )
        self.max_dt = network.config.max_dt if max_dt is None else max_dt
        self.rng = MeshRNG(seed)
        self.frames = 0
        self.stalls = 0
        self.last_time = env.now
        self.frame_callbacks: List[Callable[[Network, float], Any]] = []
        self.process = env.process(self.frame_loop())

    def on_frame(self, callback: Callable[[Network, float], Any]) -> None:
        self.frame_callbacks.append(callback)

    def frame_loop(self):
        try:
            while True:
                yield self.env.timeout(self.frame_time)
                self.frame(self.env.now)
        except simpy.Interrupt:
            logger.debug("Frame loop stalled at %.3f", self.env.now)

    def frame(self, now: float) -> None:
        """Process one frame at timestamp ``now``.

        Args:
            now: Current timestamp in seconds.
        """
        dt = min(max(now - self.last_time, 0.0), self.max_dt)
        self.last_time = now

        if self.rng.chance(self.emit_chance):
            self.network.emit_packet()

        self.network.tick(dt)
        self.frames += 1

        for callback in self.frame_callbacks:
            callback(self.network, now)

    def stall(self, delay: float, duration: float) -> simpy.events.Process:
        """Freeze the frame clock for a while, like a backgrounded tab.

        The frame after the stall sees a large timestamp gap, which the
        time delta cap absorbs. Overlapping stalls keep the loop frozen
        until the last one ends.

        Args:
            delay: Seconds until the stall starts.
            duration: Length of the stall in seconds.

        Returns:
            SimPy process for the stall.
        """

        def stall_process():
            yield self.env.timeout(delay)
            self.stalls += 1
            if self.process.is_alive:
                self.process.interrupt()
            yield self.env.timeout(duration)
            self.stalls -= 1
            if not self.stalls and not self.process.is_alive:
                self.process = self.env.process(self.frame_loop())

        return self.env.process(stall_process())

    def schedule_resize(self, delay: float, width: float, height: float) -> simpy.events.Process:
        """Resize the network after a delay.

        Args:
            delay: Seconds until the resize.
            width: New canvas width.
            height: New canvas height.

        Returns:
            SimPy process for the resize.
        """

        def resize_process():
            yield self.env.timeout(delay)
            self.network.resize(width, height)

        return self.env.process(resize_process())

    def run(self, duration: float, updates: bool = False) -> Dict[str, Any]:
        """Run the animation for a specified duration.

        Args:
            duration: Duration in seconds.
            updates: Whether to print progress.

        Returns:
            Dictionary of calculated metrics.
        """
        if duration <= 0:
            return self.network.calculate_metrics()

        if updates:
            count = 10
            interval = duration / count

            def update():
                counter = 0
                while True:
                    yield self.env.timeout(interval)
                    counter += 1
                    progress = counter / count * 100
                    print(f"Progress: {progress:.2f}%", end="\r")

            self.env.process(update())

        self.env.run(until=self.env.now + duration)
        logger.debug("Ran %d frames, %r", self.frames, self.network)
        return self.network.calculate_metrics()
